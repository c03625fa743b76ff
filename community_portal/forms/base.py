# community_portal/forms/base.py
"""
Shared plumbing for the API schemas.

The schemas are plain WTForms forms fed from a JSON body or a multipart form.
Wire names are camelCase (``donorName``); snake_case keys are accepted too,
the same way the payments endpoints accept ``amount_cents`` / ``amountCents``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Type, TypeVar

from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, Form, IntegerField, StringField

from community_portal.errors import ValidationError

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

F = TypeVar("F", bound="SchemaForm")


def to_snake(name: str) -> str:
    return _CAMEL_RE.sub("_", str(name)).lower()


def to_camel(name: str) -> str:
    head, *rest = str(name).split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def strip_text(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


# ----------------------------
# Strict fields (JSON values arrive untyped)
# ----------------------------
class TextField(StringField):
    """StringField that refuses numbers/booleans/objects instead of stringifying them."""

    def process_formdata(self, valuelist):
        if valuelist and not isinstance(valuelist[0], str):
            self.data = None
            raise ValueError(self.gettext("Not a valid string value."))
        super().process_formdata(valuelist)


class WholeNumberField(IntegerField):
    """IntegerField that rejects booleans and floats with a fractional part."""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        raw = valuelist[0]
        if (
            isinstance(raw, bool)
            or not isinstance(raw, (int, float, str))
            or (isinstance(raw, float) and not raw.is_integer())
        ):
            self.data = None
            raise ValueError(self.gettext("Not a valid integer value."))
        if isinstance(raw, float):
            valuelist = [int(raw)]
        super().process_formdata(valuelist)


class FlagField(BooleanField):
    """BooleanField that understands JSON false as well as form strings."""

    false_values = (False, "false", "False", "0", "off", "no", "")


# ----------------------------
# Base schema
# ----------------------------
class SchemaForm(Form):
    @classmethod
    def from_payload(cls: Type[F], payload: Mapping[str, Any] | None) -> F:
        formdata: MultiDict = MultiDict()
        for key, value in (payload or {}).items():
            if value is None:
                continue
            name = to_snake(key)
            if isinstance(value, (list, tuple)):
                for item in value:
                    formdata.add(name, item)
            else:
                formdata.add(name, value)
        return cls(formdata=formdata)

    def cleaned(self) -> Dict[str, Any]:
        return {name: field.data for name, field in self._fields.items()}

    def wire_errors(self) -> Dict[str, list]:
        return {to_camel(name): list(msgs) for name, msgs in self.errors.items()}


def validate_payload(form_cls: Type[SchemaForm], payload: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Validate a raw mapping; returns the cleaned snake_case dict or raises ValidationError."""
    form = form_cls.from_payload(payload)
    if not form.validate():
        raise ValidationError(form.wire_errors())
    return form.cleaned()

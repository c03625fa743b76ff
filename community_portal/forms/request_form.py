"""
Community request / complaint schema (multipart text fields).
Files travel separately under ``files`` and are checked by the upload service.
"""

from wtforms.validators import DataRequired, Email, Optional

from .base import SchemaForm, TextField, strip_text


class RequestSubmissionForm(SchemaForm):
    full_name = TextField(
        "Full name",
        filters=[strip_text],
        validators=[DataRequired(message="Full name is required")],
    )
    email = TextField(
        "Email",
        filters=[strip_text],
        validators=[DataRequired(message="Email is required"), Email(message="Invalid email address")],
    )
    phone = TextField(
        "Phone",
        filters=[strip_text],
        validators=[DataRequired(message="Phone is required")],
    )
    address = TextField("Address", filters=[strip_text], validators=[Optional()])
    request_type = TextField(
        "Request type",
        filters=[strip_text],
        validators=[DataRequired(message="Request type is required")],
    )
    subject = TextField(
        "Subject",
        filters=[strip_text],
        validators=[DataRequired(message="Subject is required")],
    )
    description = TextField(
        "Description",
        filters=[strip_text],
        validators=[DataRequired(message="Description is required")],
    )

    def cleaned(self):
        data = super().cleaned()
        data["address"] = data.get("address") or None
        return data

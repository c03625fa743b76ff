"""Contact form schema."""

from wtforms.validators import DataRequired, Email

from .base import SchemaForm, TextField, strip_text


class ContactForm(SchemaForm):
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
    subject = TextField(
        "Subject",
        filters=[strip_text],
        validators=[DataRequired(message="Subject is required")],
    )
    message = TextField(
        "Message",
        filters=[strip_text],
        validators=[DataRequired(message="Message is required")],
    )

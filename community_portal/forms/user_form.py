from wtforms.validators import DataRequired, Length

from .base import SchemaForm, TextField, strip_text


class UserForm(SchemaForm):
    username = TextField(
        "Username",
        filters=[strip_text],
        validators=[DataRequired(message="Username is required"), Length(max=150)],
    )
    # Not stripped: whitespace is significant in a password
    password = TextField("Password", validators=[DataRequired(message="Password is required")])

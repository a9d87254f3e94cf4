from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import (
    DateField,
    DecimalField,
    PasswordField,
    StringField,
)
from wtforms.validators import (
    DataRequired,
    Email,
    Length,
    NoneOf,
    NumberRange,
    Optional,
    ValidationError,
)

from models.project import BUDGET_PLACES, MAX_BUDGET, STATUS_ALL


class JsonForm(FlaskForm):
    """Form fed from a JSON payload rather than an HTML post.

    The API authenticates with bearer tokens so CSRF protection is off.
    """

    class Meta:
        csrf = False

    @classmethod
    def from_payload(cls, payload):
        return cls(formdata=payload_to_formdata(payload))


def payload_to_formdata(payload) -> MultiDict:
    """Normalize a decoded JSON body into form data.

    Nulls are dropped so they behave like absent fields, everything else
    is passed as text so the field coercion runs on it.
    """
    formdata = MultiDict()
    if not isinstance(payload, dict):
        return formdata
    for key, value in payload.items():
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        formdata.add(key, str(value))
    return formdata


class RegisterForm(JsonForm):
    email = StringField(
        "Email",
        validators=[
            DataRequired(message="Email is required."),
            Email(message="Email address is invalid."),
            Length(max=255),
        ],
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(message="Password is required."),
            Length(min=6, message="Password must be at least 6 characters."),
        ],
    )
    name = StringField(
        "Name",
        validators=[
            DataRequired(message="Name is required."),
            Length(max=120, message="Name must be 120 characters or fewer."),
        ],
    )


class LoginForm(JsonForm):
    email = StringField("Email", [DataRequired(message="Email is required.")])
    password = PasswordField("Password", [DataRequired(message="Password is required.")])


class ProjectForm(JsonForm):
    name = StringField(
        "Name",
        validators=[
            DataRequired(message="Name is required."),
            Length(max=255),
        ],
    )
    status = StringField(
        "Status",
        validators=[
            DataRequired(message="Status is required."),
            Length(max=50),
            NoneOf([STATUS_ALL], message="'all' is not a valid project status."),
        ],
    )
    deadline = DateField(
        "Deadline",
        format="%Y-%m-%d",
        validators=[Optional()],
    )
    assigned_team_member = StringField(
        "Assigned Team Member",
        validators=[Optional(), Length(max=255)],
    )
    budget = DecimalField(
        "Budget",
        places=BUDGET_PLACES,
        validators=[
            Optional(),
            NumberRange(
                min=0,
                max=MAX_BUDGET,
                message=f"Budget must be between 0 and {MAX_BUDGET}.",
            ),
        ],
    )

    def validate_budget(self, field):
        if field.data is None or field.errors:
            return
        if field.data.normalize().as_tuple().exponent < -BUDGET_PLACES:
            raise ValidationError(f"Budget cannot have more than {BUDGET_PLACES} decimal places.")

    def project_data(self):
        return {
            "name": self.name.data.strip(),
            "status": self.status.data.strip(),
            "deadline": self.deadline.data,
            "assigned_team_member": (self.assigned_team_member.data or "").strip() or None,
            "budget": self.budget.data,
        }

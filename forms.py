from flask_wtf import FlaskForm
from wtforms import (
    BooleanField,
    IntegerField,
    SelectField,
    SelectMultipleField,
    StringField,
    TextAreaField,
    URLField,
)
from wtforms.validators import (
    DataRequired,
    InputRequired,
    Length,
    Optional,
    URL,
    ValidationError,
)

REVIEW_STATUS_CHOICES = [
    ("under_review", "Under review"),
    ("accepted", "Accepted"),
    ("rejected", "Rejected"),
]


class ModuleForm(FlaskForm):
    title = StringField(
        "Title",
        validators=[
            DataRequired(message="Module title is required."),
            Length(max=200, message="Title must be 200 characters or fewer."),
        ],
    )
    description = TextAreaField("Description", [Optional(), Length(max=2000)])
    duration = StringField("Estimated duration", [Optional(), Length(max=100)])
    order_index = IntegerField("Position", [Optional()])


class ReorderModulesForm(FlaskForm):
    module_ids = SelectMultipleField("Modules", coerce=int, validate_choice=False)


class ModuleToggleForm(FlaskForm):
    is_completed = BooleanField("Completed")

    def validate_is_completed(self, field):
        if not field.raw_data:
            raise ValidationError("is_completed is required.")


class ProgressForm(ModuleToggleForm):
    module_id = IntegerField("Module", [InputRequired(message="module_id is required.")])


class ApplicationForm(FlaskForm):
    project_id = IntegerField("Project", [InputRequired(message="project_id is required.")])
    cover_letter = TextAreaField("Cover letter", [Optional(), Length(max=5000)])


class ReviewForm(FlaskForm):
    status = SelectField(
        "Decision",
        choices=REVIEW_STATUS_CHOICES,
        validators=[DataRequired(message="A review status is required.")],
    )
    review_notes = TextAreaField("Notes", [Optional(), Length(max=2000)])


class CompleteJobForm(FlaskForm):
    application_id = IntegerField("Application", [InputRequired(message="application_id is required.")])
    feedback = TextAreaField("Feedback", [Optional(), Length(max=2000)])
    deliverable_url = URLField(
        "Final deliverable",
        validators=[
            Optional(),
            URL(require_tld=False, message="Deliverable must be a valid URL."),
            Length(max=500),
        ],
    )


class MarkNotificationsReadForm(FlaskForm):
    notification_ids = SelectMultipleField("Notifications", coerce=int, validate_choice=False)

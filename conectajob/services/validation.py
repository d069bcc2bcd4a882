import math
from datetime import date

from email_validator import EmailNotValidError, validate_email as check_email

from conectajob.core.errors import ValidationError

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8
MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 20


def validate_email(email: str) -> None:
    try:
        check_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Please enter a valid email address")


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def validate_username(username: str) -> None:
    if len(username.strip()) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters")


def validate_project_title(title: str) -> None:
    if len(title.strip()) < MIN_TITLE_LENGTH:
        raise ValidationError(f"Title must be at least {MIN_TITLE_LENGTH} characters")


def validate_project_description(description: str) -> None:
    if len(description.strip()) < MIN_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters")


def validate_project_budget(budget: float) -> None:
    if not (math.isfinite(budget) and budget > 0):
        raise ValidationError("Budget must be greater than zero")


def validate_project_deadline(deadline: date, today: date | None = None) -> None:
    # The deadline day itself has already started, so it must be strictly later
    if deadline <= (today or date.today()):
        raise ValidationError("Deadline must be a future date")


def validate_rating_value(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be a whole number between 1 and 5")

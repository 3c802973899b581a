"""Password composition rules shared by the change-password flow and user creation."""
import re
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

SPECIAL_CHARACTERS = "@$!%*?&"
MIN_LENGTH = 8

STRONG_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")
COMPOSITION_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")

REQUIREMENT_LABELS = {
    "minLength": "at least 8 characters",
    "hasLowercase": "lowercase letter",
    "hasUppercase": "uppercase letter",
    "hasNumber": "number",
    "hasSpecial": "special character (@$!%*?&)",
}


def check_requirements(password: str) -> Dict[str, bool]:
    password = password or ""
    return {
        "minLength": len(password) >= MIN_LENGTH,
        "hasLowercase": bool(re.search(r"[a-z]", password)),
        "hasUppercase": bool(re.search(r"[A-Z]", password)),
        "hasNumber": bool(re.search(r"\d", password)),
        "hasSpecial": bool(re.search(r"[@$!%*?&]", password)),
    }


def get_password_strength(password: str) -> Dict[str, object]:
    """Score a password by how many of the five rules it meets."""
    if not password:
        return {"score": 0, "label": "", "color": "default"}

    score = sum(1 for met in check_requirements(password).values() if met)
    if score <= 2:
        return {"score": score, "label": "Weak", "color": "error"}
    if score <= 3:
        return {"score": score, "label": "Fair", "color": "warning"}
    if score <= 4:
        return {"score": score, "label": "Good", "color": "info"}
    return {"score": score, "label": "Strong", "color": "success"}


def validate_password_strength(password: str) -> Dict[str, object]:
    return {
        "is_valid": bool(STRONG_PASSWORD_RE.match(password or "")),
        "requirements": check_requirements(password),
    }


def missing_requirements(password: str) -> List[str]:
    requirements = check_requirements(password)
    return [REQUIREMENT_LABELS[key] for key, met in requirements.items() if not met]


def policy_violation_detail(password: str) -> Dict[str, object]:
    missing = missing_requirements(password)
    if missing:
        message = f"Password must contain: {', '.join(missing)}"
    else:
        # every rule met but a character outside the allowed set is present
        message = f"Password may only contain letters, numbers and {SPECIAL_CHARACTERS}"
    return {
        "message": message,
        "requirements": check_requirements(password),
        "errorType": "PASSWORD_POLICY_VIOLATION",
    }


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_password: str
    new_password: str
    confirm_password: Optional[str] = None

    @field_validator("current_password")
    @classmethod
    def current_password_required(cls, value):
        if not value:
            raise ValueError("Current password is required")
        return value

    @field_validator("new_password")
    @classmethod
    def new_password_composition(cls, value):
        if not value:
            raise ValueError("New password is required")
        if len(value) < MIN_LENGTH:
            raise ValueError("Password must be at least 8 characters")
        if not COMPOSITION_RE.match(value):
            raise ValueError(
                "Password must contain uppercase, lowercase, number, and special character (@$!%*?&)"
            )
        return value

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password == "":
            raise ValueError("Please confirm your password")
        if self.confirm_password is not None and self.confirm_password != self.new_password:
            raise ValueError("Passwords must match")
        return self


def validate_change_form(values: Dict[str, Optional[str]]) -> Dict[str, str]:
    """Run the change-password form schema and return ``{field: message}`` for each failure."""
    try:
        ChangePasswordRequest(**values)
    except ValidationError as exc:
        errors = {}
        for err in exc.errors():
            field = err["loc"][0] if err["loc"] else "confirmPassword"
            message = err["msg"]
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            errors.setdefault(str(field), message)
        return errors
    return {}

"""
Request payload schemas.

Every form is validated here before it reaches the stores; failures surface
as ValidationError with the first offending field's message.
"""

from __future__ import annotations

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from memberauth.models.user import Role
from memberauth.utils.exceptions import ValidationError

MAX_FIELD_LENGTH = 255
DEFAULT_MIN_PASSWORD_LENGTH = 6

FormT = TypeVar("FormT", bound=BaseModel)


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip().lower()
        if len(value) > MAX_FIELD_LENGTH:
            raise ValueError(f"must be at most {MAX_FIELD_LENGTH} characters")
    return value


class SignupForm(BaseModel):
    name: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)
    email: EmailStr
    password: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: Any) -> Any:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str, info: ValidationInfo) -> str:
        minimum = (info.context or {}).get("min_password_length", DEFAULT_MIN_PASSWORD_LENGTH)
        if len(v) < minimum:
            raise ValueError(f"must be at least {minimum} characters")
        return v


class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: Any) -> Any:
        return _normalize_email(v)


class RoleChangeForm(BaseModel):
    email: EmailStr
    role: Role

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: Any) -> Any:
        return _normalize_email(v)


def _first_error(exc: PydanticValidationError) -> ValidationError:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ())) or None
    msg = err.get("msg", "Invalid value")
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    text = f"{field}: {msg}" if field else msg
    return ValidationError(text, field=field)


def validate(form: Type[FormT], data: Dict[str, Any], **context: Any) -> FormT:
    """Validate raw input against a form schema or raise ValidationError."""
    try:
        return form.model_validate(data, context=context or None)
    except PydanticValidationError as e:
        raise _first_error(e) from None

"""
Pydantic schemas for registration submissions.

The web form posts camelCase keys (``lastName``, ``firstName``, ...);
the models expose snake_case attributes and accept either spelling.
All five contact fields are required: a missing key, ``null`` or a
blank string is rejected before anything is written.  A phone sent as a
JSON number is kept as its digits.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class RegistrationCreate(BaseModel):
    """Schema for a registration form submission."""

    last_name: str = Field(..., alias="lastName", examples=["Иванов"])
    first_name: str = Field(..., alias="firstName", examples=["Иван"])
    age: int = Field(..., examples=[30])
    phone: str = Field(..., examples=["+71234567890"])
    telegram: str = Field(..., examples=["@ivanov"])
    photo_base64: Optional[str] = Field(
        None,
        alias="photoBase64",
        description="Optional base64-encoded photo; stored as is",
    )

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("phone", mode="before")
    @classmethod
    def phone_number_as_text(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("last_name", "first_name", "phone", "telegram")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("age")
    @classmethod
    def age_present(cls, v: int) -> int:
        # 0 is what an untouched numeric form field sends
        if v == 0:
            raise ValueError("must not be empty")
        return v

    @field_validator("photo_base64")
    @classmethod
    def empty_photo_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class RegistrationResponse(BaseModel):
    """Returned after a registration has been committed."""

    success: bool = True
    registration_id: str = Field(..., alias="registrationId")
    message: str

    model_config = {
        "populate_by_name": True,
    }

import re
from datetime import date

from pydantic import AliasChoices, BaseModel, Field, field_validator

MAX_NAME_LENGTH = 80
MAX_PHONE_LENGTH = 40
MAX_PHONE_DIGITS = 15
MAX_EMAIL_LENGTH = 254
MAX_VEHICLE_LENGTH = 120
MAX_INTENT_ID_LENGTH = 255

PHONE_PATTERN = re.compile(r'^\+?[0-9 ().-]+$')
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
DATE_PATTERN = re.compile(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$')
CONTROL_CHARACTERS = re.compile(r'[\x00-\x1f\x7f]')


class BookingRequest(BaseModel):
    """Customer details shared by the cash and card booking endpoints."""

    booking_date: date | None = Field(default=None, alias='date')
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    vehicle: str | None = None

    class Config:
        populate_by_name = True
        validate_default = True

    @field_validator('booking_date', mode='before')
    @classmethod
    def validate_booking_date(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError('Please select a date.')

        if isinstance(value, date):
            return value

        if not isinstance(value, str) or not DATE_PATTERN.match(value.strip()):
            raise ValueError('Please select a valid date.')

        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError('Please select a valid date.') from exc

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str:
        normalized = (value or '').strip()
        if not normalized:
            raise ValueError('Please enter your name.')
        if CONTROL_CHARACTERS.search(normalized):
            raise ValueError('Please enter a valid name.')
        return normalized[:MAX_NAME_LENGTH]

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value: str | None) -> str:
        normalized = (value or '').strip()
        if not normalized:
            raise ValueError('Please enter your phone number.')

        digit_count = sum(character.isdigit() for character in normalized)
        if (
            len(normalized) > MAX_PHONE_LENGTH
            or not PHONE_PATTERN.match(normalized)
            or not 1 <= digit_count <= MAX_PHONE_DIGITS
        ):
            raise ValueError('Please enter a valid phone number.')

        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip().lower()
        if not normalized:
            return None

        if len(normalized) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(normalized):
            raise ValueError('Please enter a valid email address.')

        return normalized

    @field_validator('vehicle')
    @classmethod
    def validate_vehicle(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if CONTROL_CHARACTERS.search(normalized):
            raise ValueError('Please enter a valid vehicle description.')
        return normalized[:MAX_VEHICLE_LENGTH] or None


class ConfirmPaymentRequest(BookingRequest):
    intent_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices('intentId', 'paymentIntentId', 'intent_id'),
    )

    @field_validator('intent_id')
    @classmethod
    def validate_intent_id(cls, value: str | None) -> str:
        normalized = (value or '').strip()
        if not normalized or len(normalized) > MAX_INTENT_ID_LENGTH:
            raise ValueError('Missing payment or date information.')
        return normalized


class BookingConfirmationResponse(BaseModel):
    success: bool = True
    message: str
    date: date
    method: str
    payment_id: str | None = Field(default=None, serialization_alias='paymentId')


class PaymentIntentResponse(BaseModel):
    success: bool = True
    client_secret: str | None = Field(serialization_alias='clientSecret')
    intent_id: str = Field(serialization_alias='intentId')


class PublishableKeyResponse(BaseModel):
    publishable_key: str = Field(serialization_alias='publishableKey')

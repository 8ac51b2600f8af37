import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

BOOKINGS_FILE = os.getenv("BOOKINGS_FILE", "bookings.json")

BUSINESS_NAME = os.getenv("BUSINESS_NAME", "Flawless Finish Ceramic Coating")
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/Los_Angeles")
# 0=Monday .. 6=Sunday
CLOSURE_WEEKDAY = int(os.getenv("CLOSURE_WEEKDAY", "6"))
DEFAULT_AVAILABILITY_DAYS = int(os.getenv("DEFAULT_AVAILABILITY_DAYS", "30"))
MAX_BOOKING_HORIZON_DAYS = int(os.getenv("MAX_BOOKING_HORIZON_DAYS", "90"))

DEPOSIT_AMOUNT_CENTS = int(os.getenv("DEPOSIT_AMOUNT_CENTS", "25000"))
CURRENCY = os.getenv("CURRENCY", "usd").lower()
PAYMENT_SERVICE_LABEL = os.getenv("PAYMENT_SERVICE_LABEL", f"{BUSINESS_NAME} Deposit")

STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY", "")

EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.gmail.com")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_USE_TLS = _get_bool(os.getenv("EMAIL_USE_TLS"), default=True)
EMAIL_USER = os.getenv("EMAIL_USER", "")
EMAIL_PASS = os.getenv("EMAIL_PASS", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", f'"{BUSINESS_NAME} Website" <{EMAIL_USER}>' if EMAIL_USER else "")
OWNER_EMAIL = os.getenv("OWNER_EMAIL", "")
NOTIFICATION_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "10"))

ALLOWED_ORIGINS = _get_list(os.getenv("ALLOWED_ORIGINS"), default=["http://localhost:3000"])


def validate_runtime_config() -> None:
    if APP_ENV.lower() != "production":
        return
    if not STRIPE_SECRET_KEY:
        raise RuntimeError("STRIPE_SECRET_KEY must be set in production.")
    if not OWNER_EMAIL:
        raise RuntimeError("OWNER_EMAIL must be set in production.")
    if not 0 <= CLOSURE_WEEKDAY <= 6:
        raise RuntimeError("CLOSURE_WEEKDAY must be between 0 (Monday) and 6 (Sunday).")

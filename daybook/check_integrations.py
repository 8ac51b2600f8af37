"""Check that the Stripe and email credentials in the environment work.

Usage:
    python -m daybook.check_integrations
"""
import sys

from daybook.core import config
from daybook.core.exceptions import PaymentGatewayUnavailable
from daybook.main import build_booking_service


def check_stripe(service) -> bool:
    if service.gateway is None:
        print("Stripe: FAIL - STRIPE_SECRET_KEY not found in environment variables")
        return False
    if not service.publishable_key:
        print("Stripe: WARN - STRIPE_PUBLISHABLE_KEY is empty; the payment widget cannot load")

    try:
        intent = service.gateway.create_intent(
            service.deposit_amount,
            service.currency,
            metadata={"test": "true", "service": service.service_label},
        )
    except PaymentGatewayUnavailable as exc:
        print(f"Stripe: FAIL - {exc.message}")
        return False

    print(f"Stripe: PASS - created payment intent {intent.intent_id} ({intent.status.value})")
    return True


def check_email(service) -> bool:
    error = service.notifier.verify_connection()
    if error:
        print(f"Email: FAIL - {error}")
        return False
    print(f"Email: PASS - logged in to {config.EMAIL_HOST} as {config.EMAIL_USER}")
    return True


def main() -> None:
    service = build_booking_service()
    stripe_ok = check_stripe(service)
    email_ok = check_email(service)
    if not (stripe_ok and email_ok):
        print("Some integrations need configuration. Check your .env file.", file=sys.stderr)
        sys.exit(1)
    print("All integrations working.")


if __name__ == "__main__":
    main()

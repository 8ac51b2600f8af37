"""
Stripe payment adapter.

Wraps the two PaymentIntent calls the booking flow needs and translates
Stripe's state machine into the handful of outcomes the booking handler
cares about.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import stripe

from daybook.core.exceptions import PaymentGatewayUnavailable

logger = logging.getLogger(__name__)

GATEWAY_UNAVAILABLE_MESSAGE = 'Payment system temporarily unavailable. Please contact us directly.'

PENDING_STRIPE_STATUSES = {
    'processing',
    'requires_payment_method',
    'requires_confirmation',
    'requires_action',
    'requires_capture',
}


class PaymentStatus(str, Enum):
    PENDING = 'pending'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    OTHER = 'other'


@dataclass(frozen=True)
class PaymentIntentHandle:
    intent_id: str
    client_secret: Optional[str]
    status: PaymentStatus
    amount: int
    currency: str
    metadata: dict[str, str] = field(default_factory=dict)


def map_stripe_status(value: Optional[str]) -> PaymentStatus:
    """Map a raw Stripe PaymentIntent status onto PaymentStatus"""
    if value == 'succeeded':
        return PaymentStatus.SUCCEEDED
    if value in PENDING_STRIPE_STATUSES:
        return PaymentStatus.PENDING
    if value == 'canceled':
        return PaymentStatus.FAILED
    return PaymentStatus.OTHER


class StripeGateway:
    """Creates and inspects Stripe PaymentIntents with a fixed secret key."""

    def __init__(self, secret_key: str, publishable_key: str = ''):
        self._secret_key = secret_key
        self.publishable_key = publishable_key

    def create_intent(self, amount_minor_units: int, currency: str, metadata: dict[str, str]) -> PaymentIntentHandle:
        """
        Create a PaymentIntent for ``amount_minor_units``.

        Args:
            amount_minor_units: Amount in the currency's smallest unit (cents for USD)
            currency: ISO currency code, lowercase
            metadata: Non-personal labels attached to the intent (date, service name)

        Returns:
            PaymentIntentHandle carrying the client secret for the browser widget

        Raises:
            PaymentGatewayUnavailable: Stripe could not be reached or answered with garbage
        """
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor_units,
                currency=currency,
                metadata=metadata,
                api_key=self._secret_key,
            )
        except stripe.StripeError as exc:
            logger.exception('Stripe PaymentIntent creation failed')
            raise PaymentGatewayUnavailable(GATEWAY_UNAVAILABLE_MESSAGE) from exc

        handle = self._to_handle(intent)
        logger.info('Created payment intent %s for %s %s', handle.intent_id, amount_minor_units, currency)
        return handle

    def retrieve_intent(self, intent_id: str) -> PaymentIntentHandle:
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self._secret_key)
        except stripe.StripeError as exc:
            logger.exception('Stripe PaymentIntent retrieval failed for %s', intent_id)
            raise PaymentGatewayUnavailable(GATEWAY_UNAVAILABLE_MESSAGE) from exc

        return self._to_handle(intent)

    def retrieve_status(self, intent_id: str) -> PaymentStatus:
        return self.retrieve_intent(intent_id).status

    def _to_handle(self, intent: Any) -> PaymentIntentHandle:
        try:
            metadata = intent['metadata'] or {}
            return PaymentIntentHandle(
                intent_id=str(intent['id']),
                client_secret=intent['client_secret'],
                status=map_stripe_status(intent['status']),
                amount=int(intent['amount']),
                currency=str(intent['currency']).lower(),
                metadata={str(key): str(metadata[key]) for key in metadata.keys()},
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.exception('Stripe returned a malformed PaymentIntent')
            raise PaymentGatewayUnavailable(GATEWAY_UNAVAILABLE_MESSAGE) from exc

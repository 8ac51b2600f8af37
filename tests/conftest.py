import dataclasses
from datetime import date

import pytest

from daybook.core.exceptions import PaymentGatewayUnavailable
from daybook.ledger import BookingLedger
from daybook.services.bookings import BookingService
from daybook.services.payments import PaymentIntentHandle, PaymentStatus

# Monday
TODAY = date(2025, 6, 2)
DEPOSIT_CENTS = 25000


class FakeGateway:
    publishable_key = 'pk_test_123'

    def __init__(self):
        self.intents: dict[str, PaymentIntentHandle] = {}

    def create_intent(self, amount_minor_units, currency, metadata):
        intent_id = f'pi_test_{len(self.intents) + 1}'
        handle = PaymentIntentHandle(
            intent_id=intent_id,
            client_secret=f'{intent_id}_secret_abc',
            status=PaymentStatus.PENDING,
            amount=amount_minor_units,
            currency=currency,
            metadata=dict(metadata),
        )
        self.intents[intent_id] = handle
        return handle

    def retrieve_intent(self, intent_id):
        if intent_id not in self.intents:
            raise PaymentGatewayUnavailable('Payment system temporarily unavailable. Please contact us directly.')
        return self.intents[intent_id]

    def retrieve_status(self, intent_id):
        return self.retrieve_intent(intent_id).status

    def set_status(self, intent_id, status):
        self.intents[intent_id] = dataclasses.replace(self.intents[intent_id], status=status)


class RecordingNotifier:
    def __init__(self):
        self.bookings = []
        self.unbooked_payments = []

    def notify_booking(self, booking):
        self.bookings.append(booking)

    def notify_unbooked_payment(self, payment_reference, booking, reason='the day was already taken'):
        self.unbooked_payments.append((payment_reference, booking, reason))


@pytest.fixture
def ledger(tmp_path):
    return BookingLedger(tmp_path / 'bookings.json')


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def booking_service(ledger, gateway, notifier):
    return BookingService(
        ledger=ledger,
        gateway=gateway,
        notifier=notifier,
        today=lambda: TODAY,
        deposit_amount=DEPOSIT_CENTS,
        currency='usd',
        service_label='Ceramic Coating Deposit',
        closure_weekday=6,
        default_days=30,
        max_days=90,
    )

"""
Booking transactions.

Cash bookings are recorded immediately. Card bookings go through Stripe in two
steps: an intent is created (nothing is reserved), then once the browser has
confirmed the payment the intent is re-read from Stripe and, if it succeeded,
the booking is recorded. Once a deposit is captured, any failure to record it
is logged as `captured_unbooked` and the operator is alerted. The ledger guard is only held for the
check-then-append itself; Stripe and SMTP calls happen outside it.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from fastapi import BackgroundTasks

from daybook.core.exceptions import (
    CapturedPaymentUnbooked,
    DateAlreadyBooked,
    InvalidBookingRequest,
    LedgerUnavailable,
    PaymentGatewayUnavailable,
    PaymentIncomplete,
)
from daybook.ledger import BookingLedger
from daybook.models.availability import AvailabilityDay
from daybook.models.booking import Booking, PaymentMethod
from daybook.schemas import BookingRequest, ConfirmPaymentRequest
from daybook.services.availability import clamp_days, compute_availability, is_bookable_day
from daybook.services.notifications import EmailNotifier
from daybook.services.payments import (
    GATEWAY_UNAVAILABLE_MESSAGE,
    PaymentIntentHandle,
    PaymentStatus,
    StripeGateway,
)

logger = logging.getLogger(__name__)

UNBOOKABLE_PAYMENT_MESSAGE = (
    'We could not book that day with this payment. '
    'We have been notified and will refund your deposit.'
)


class BookingService:
    def __init__(
        self,
        ledger: BookingLedger,
        gateway: Optional[StripeGateway],
        notifier: EmailNotifier,
        today: Callable[[], date],
        deposit_amount: int = 25000,
        currency: str = 'usd',
        service_label: str = 'Booking Deposit',
        closure_weekday: int = 6,
        default_days: int = 30,
        max_days: int = 90,
    ):
        self.ledger = ledger
        self.gateway = gateway
        self.notifier = notifier
        self.today = today
        self.deposit_amount = deposit_amount
        self.currency = currency
        self.service_label = service_label
        self.closure_weekday = closure_weekday
        self.default_days = default_days
        self.max_days = max_days

    @property
    def publishable_key(self) -> str:
        return self.gateway.publishable_key if self.gateway else ''

    def availability(self, days: Optional[int] = None, include_closed: bool = False) -> list[AvailabilityDay]:
        horizon = clamp_days(days if days is not None else self.default_days, self.max_days)
        return compute_availability(
            self.ledger.read_all(),
            today=self.today(),
            days=horizon,
            closure_weekday=self.closure_weekday,
            include_closed=include_closed,
        )

    def ensure_bookable(self, day: date) -> None:
        if not is_bookable_day(day, self.today(), self.max_days, self.closure_weekday):
            raise InvalidBookingRequest('That day is not available for booking. Please pick another date.')

    def book_cash(self, request: BookingRequest, tasks: BackgroundTasks) -> Booking:
        self.ensure_bookable(request.booking_date)

        booking = self.ledger.append_unique(self._new_booking(request, PaymentMethod.CASH, deposit=0))
        tasks.add_task(self.notifier.notify_booking, booking)
        return booking

    def create_payment_intent(self, request: BookingRequest) -> PaymentIntentHandle:
        gateway = self._require_gateway()
        self.ensure_bookable(request.booking_date)

        if self.ledger.find_by_date(request.booking_date) is not None:
            raise DateAlreadyBooked()

        return gateway.create_intent(
            self.deposit_amount,
            self.currency,
            metadata={
                'date': request.booking_date.isoformat(),
                'service': self.service_label,
            },
        )

    def confirm_payment(self, request: ConfirmPaymentRequest, tasks: BackgroundTasks) -> Booking:
        gateway = self._require_gateway()

        intent = gateway.retrieve_intent(request.intent_id)
        if intent.status is not PaymentStatus.SUCCEEDED:
            raise PaymentIncomplete('Payment not completed.')

        # From here on the deposit is captured: every failure must reach the operator.
        booking = self._new_booking(
            request,
            PaymentMethod.CARD,
            deposit=intent.amount,
            payment_reference=intent.intent_id,
        )
        try:
            return self._record_captured_payment(intent, booking, tasks)
        except LedgerUnavailable:
            self._report_unbooked(intent, booking, tasks, 'the booking could not be saved')
            raise

    def _record_captured_payment(
        self,
        intent: PaymentIntentHandle,
        booking: Booking,
        tasks: BackgroundTasks,
    ) -> Booking:
        existing = self.ledger.find_by_date(booking.date)
        if existing is not None and existing.payment_reference == intent.intent_id:
            logger.info('Payment %s was already recorded for %s', intent.intent_id, existing.date)
            return existing

        if (
            intent.amount != self.deposit_amount
            or intent.currency != self.currency
            or intent.metadata.get('date') != booking.date.isoformat()
        ):
            self._report_unbooked(intent, booking, tasks, 'the payment does not match the requested booking')
            raise CapturedPaymentUnbooked(intent.intent_id, message=UNBOOKABLE_PAYMENT_MESSAGE)

        try:
            self.ensure_bookable(booking.date)
        except InvalidBookingRequest as exc:
            self._report_unbooked(intent, booking, tasks, 'the day is no longer bookable')
            raise CapturedPaymentUnbooked(intent.intent_id, message=UNBOOKABLE_PAYMENT_MESSAGE) from exc

        try:
            self.ledger.append_unique(booking)
        except DateAlreadyBooked as exc:
            if exc.existing is not None and exc.existing.payment_reference == intent.intent_id:
                logger.info('Payment %s was already recorded for %s', intent.intent_id, exc.existing.date)
                return exc.existing

            self._report_unbooked(intent, booking, tasks, 'the day was already taken')
            raise CapturedPaymentUnbooked(intent.intent_id, existing=exc.existing) from exc

        tasks.add_task(self.notifier.notify_booking, booking)
        return booking

    def _report_unbooked(
        self,
        intent: PaymentIntentHandle,
        booking: Booking,
        tasks: BackgroundTasks,
        reason: str,
    ) -> None:
        logger.error(
            'captured_unbooked: payment %s captured %s %s for %s but %s; manual refund required',
            intent.intent_id,
            intent.amount,
            intent.currency,
            booking.date.isoformat(),
            reason,
        )
        tasks.add_task(self.notifier.notify_unbooked_payment, intent.intent_id, booking, reason)

    def _require_gateway(self) -> StripeGateway:
        if self.gateway is None:
            raise PaymentGatewayUnavailable(GATEWAY_UNAVAILABLE_MESSAGE)
        return self.gateway

    def _new_booking(
        self,
        request: BookingRequest,
        method: PaymentMethod,
        deposit: int,
        payment_reference: Optional[str] = None,
    ) -> Booking:
        return Booking(
            date=request.booking_date,
            method=method,
            deposit=deposit,
            payment_reference=payment_reference,
            created_at=datetime.now(timezone.utc),
            name=request.name,
            phone=request.phone,
            email=request.email,
            vehicle=request.vehicle,
        )

"""Booking domain errors.

Routes translate these into HTTP responses; nothing below the route layer
knows about status codes.
"""


class BookingError(Exception):
    """Base class for booking failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidBookingRequest(BookingError):
    """The request is malformed or asks for a day that cannot be booked."""


class DateAlreadyBooked(BookingError):
    """Another booking already holds the requested date."""

    def __init__(self, message: str = 'That day is already booked.', existing=None):
        super().__init__(message)
        self.existing = existing


class CapturedPaymentUnbooked(DateAlreadyBooked):
    """The gateway captured a deposit but no booking could be recorded for it."""

    def __init__(
        self,
        payment_reference: str,
        existing=None,
        message: str = (
            'That day was booked by someone else while your payment was processing. '
            'We have been notified and will refund your deposit.'
        ),
    ):
        super().__init__(message, existing=existing)
        self.payment_reference = payment_reference


class PaymentIncomplete(BookingError):
    pass


class PaymentGatewayUnavailable(BookingError):
    pass


class LedgerUnavailable(BookingError):
    pass

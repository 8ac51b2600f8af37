from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from daybook.core.exceptions import (
    CapturedPaymentUnbooked,
    DateAlreadyBooked,
    InvalidBookingRequest,
    LedgerUnavailable,
    PaymentGatewayUnavailable,
    PaymentIncomplete,
)
from daybook.models.availability import AvailabilityResponse
from daybook.schemas import (
    BookingConfirmationResponse,
    BookingRequest,
    ConfirmPaymentRequest,
    PaymentIntentResponse,
    PublishableKeyResponse,
)
from daybook.services.bookings import BookingService

router = APIRouter(tags=['bookings'])

STORAGE_UNAVAILABLE_MESSAGE = 'Booking system temporarily unavailable. Please call us to book.'


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


def raise_http_error(exc: Exception) -> None:
    if isinstance(exc, DateAlreadyBooked):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc
    if isinstance(exc, (InvalidBookingRequest, PaymentIncomplete)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    if isinstance(exc, PaymentGatewayUnavailable):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message) from exc
    if isinstance(exc, LedgerUnavailable):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORAGE_UNAVAILABLE_MESSAGE,
        ) from exc
    raise exc


@router.get('/availability', response_model=AvailabilityResponse)
def list_availability(
    days: int | None = Query(default=None),
    include_closed: bool = Query(default=False),
    service: BookingService = Depends(get_booking_service),
):
    try:
        return AvailabilityResponse(days=service.availability(days, include_closed=include_closed))
    except LedgerUnavailable as exc:
        raise_http_error(exc)


@router.post('/create-payment-intent', response_model=PaymentIntentResponse)
def create_payment_intent(
    data: BookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    try:
        intent = service.create_payment_intent(data)
    except (DateAlreadyBooked, InvalidBookingRequest, PaymentGatewayUnavailable, LedgerUnavailable) as exc:
        raise_http_error(exc)

    return PaymentIntentResponse(client_secret=intent.client_secret, intent_id=intent.intent_id)


@router.post('/confirm-payment', response_model=BookingConfirmationResponse)
def confirm_payment(
    data: ConfirmPaymentRequest,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
):
    try:
        booking = service.confirm_payment(data, background_tasks)
    except CapturedPaymentUnbooked as exc:
        # Refund alerts are queued on background_tasks, so they have to ride on these responses.
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={'success': False, 'message': exc.message},
            background=background_tasks,
        )
    except LedgerUnavailable:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={'success': False, 'message': STORAGE_UNAVAILABLE_MESSAGE},
            background=background_tasks,
        )
    except (PaymentIncomplete, PaymentGatewayUnavailable) as exc:
        raise_http_error(exc)

    return BookingConfirmationResponse(
        message='Payment confirmed and booking saved.',
        date=booking.date,
        method=booking.method.value,
        payment_id=booking.payment_reference,
    )


@router.post('/book-cash', response_model=BookingConfirmationResponse, response_model_exclude_none=True)
def book_cash(
    data: BookingRequest,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
):
    try:
        booking = service.book_cash(data, background_tasks)
    except (DateAlreadyBooked, InvalidBookingRequest, LedgerUnavailable) as exc:
        raise_http_error(exc)

    return BookingConfirmationResponse(
        message='Cash reservation saved.',
        date=booking.date,
        method=booking.method.value,
    )


@router.get('/stripe-key', response_model=PublishableKeyResponse)
def get_publishable_key(service: BookingService = Depends(get_booking_service)):
    return PublishableKeyResponse(publishable_key=service.publishable_key)

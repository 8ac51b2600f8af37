import logging
from datetime import datetime, timezone
from functools import partial

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from daybook.core import config
from daybook.ledger import BookingLedger
from daybook.routes import booking_routes
from daybook.services.availability import business_today
from daybook.services.bookings import BookingService
from daybook.services.notifications import EmailNotifier
from daybook.services.payments import StripeGateway

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


def build_booking_service() -> BookingService:
    gateway = None
    if config.STRIPE_SECRET_KEY:
        gateway = StripeGateway(config.STRIPE_SECRET_KEY, config.STRIPE_PUBLISHABLE_KEY)
    else:
        logger.warning('STRIPE_SECRET_KEY not configured - card deposits are disabled')

    notifier = EmailNotifier(
        host=config.EMAIL_HOST,
        port=config.EMAIL_PORT,
        username=config.EMAIL_USER,
        password=config.EMAIL_PASS,
        sender=config.EMAIL_FROM,
        operator_address=config.OWNER_EMAIL,
        business_name=config.BUSINESS_NAME,
        currency=config.CURRENCY,
        timeout=config.NOTIFICATION_TIMEOUT_SECONDS,
        use_tls=config.EMAIL_USE_TLS,
    )

    return BookingService(
        ledger=BookingLedger(config.BOOKINGS_FILE),
        gateway=gateway,
        notifier=notifier,
        today=partial(business_today, config.BUSINESS_TIMEZONE),
        deposit_amount=config.DEPOSIT_AMOUNT_CENTS,
        currency=config.CURRENCY,
        service_label=config.PAYMENT_SERVICE_LABEL,
        closure_weekday=config.CLOSURE_WEEKDAY,
        default_days=config.DEFAULT_AVAILABILITY_DAYS,
        max_days=config.MAX_BOOKING_HORIZON_DAYS,
    )


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        if error.get('type') == 'json_invalid':
            return 'Invalid request.'
        reason = error.get('ctx', {}).get('error')
        if reason:
            return str(reason)
        location = '.'.join(str(part) for part in error.get('loc', ()) if part != 'body')
        return f"Invalid {location}: {error.get('msg', 'invalid value')}" if location else 'Invalid request.'
    return 'Invalid request.'


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={'success': False, 'message': str(exc.detail)},
        headers=getattr(exc, 'headers', None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'success': False, 'message': _validation_message(exc)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'success': False, 'message': 'Something went wrong. Please try again or call us.'},
    )


def create_app(booking_service: BookingService | None = None) -> FastAPI:
    config.validate_runtime_config()

    app = FastAPI(title=config.BUSINESS_NAME)
    app.state.booking_service = booking_service or build_booking_service()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=['GET', 'POST'],
        allow_headers=['*'],
    )

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get('/')
    def root():
        return {'status': f'{config.BUSINESS_NAME} booking API running'}

    @app.get('/health')
    def health():
        return {'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat()}

    app.include_router(booking_routes.router, prefix='/api')
    return app


app = create_app()

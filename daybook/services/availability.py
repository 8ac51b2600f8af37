from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from daybook.models.availability import AvailabilityDay
from daybook.models.booking import Booking


def business_today(timezone_name: str) -> date:
    return datetime.now(ZoneInfo(timezone_name)).date()


def format_day_label(day: date) -> str:
    return f'{day:%a, %b} {day.day}'


def clamp_days(days: int, max_days: int) -> int:
    return max(1, min(days, max_days))


def iterate_window(today: date, days: int) -> Iterable[date]:
    # Today is never offered; the window starts tomorrow.
    for offset in range(1, days + 1):
        yield today + timedelta(days=offset)


def is_bookable_day(day: date, today: date, max_days: int, closure_weekday: int) -> bool:
    offset = (day - today).days
    return 1 <= offset <= max_days and day.weekday() != closure_weekday


def compute_availability(
    bookings: Iterable[Booking],
    today: date,
    days: int,
    closure_weekday: int,
    include_closed: bool = False,
) -> list[AvailabilityDay]:
    booked_dates = {booking.date for booking in bookings}

    calendar: list[AvailabilityDay] = []
    for day in iterate_window(today, days):
        is_open = day.weekday() != closure_weekday
        if not is_open and not include_closed:
            continue

        calendar.append(
            AvailabilityDay(
                date=day,
                booked=day in booked_dates,
                open=is_open,
                display_label=format_day_label(day),
            )
        )

    return calendar

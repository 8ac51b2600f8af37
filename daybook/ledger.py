import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from threading import Lock
from typing import Iterable, Iterator

from pydantic import ValidationError

from daybook.core.exceptions import DateAlreadyBooked, LedgerUnavailable
from daybook.models.booking import Booking


logger = logging.getLogger(__name__)


class BookingLedger:
    """JSON-file store of confirmed bookings, one record per date.

    The whole file is rewritten on every change. Writes go to a temp file in
    the same directory and are moved into place with ``os.replace`` so readers
    only ever see the old or the new contents.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + '.lock')
        self._lock = Lock()

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        # The thread lock covers this process; flock covers other workers on the host.
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                lock_file = open(self.lock_path, 'a')
            except OSError as exc:
                logger.exception('Could not open ledger lock file %s', self.lock_path)
                raise LedgerUnavailable('Booking storage is unavailable.') from exc

            with lock_file:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
                try:
                    yield
                finally:
                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def read_all(self) -> list[Booking]:
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding='utf-8') or '[]')
        except (OSError, ValueError) as exc:
            logger.exception('Could not read ledger file %s', self.path)
            raise LedgerUnavailable('Booking storage is unavailable.') from exc

        if not isinstance(raw, list):
            logger.error('Ledger file %s does not contain a JSON array', self.path)
            raise LedgerUnavailable('Booking storage is unavailable.')

        try:
            return [Booking.model_validate(record) for record in raw]
        except ValidationError as exc:
            logger.exception('Ledger file %s contains an invalid booking record', self.path)
            raise LedgerUnavailable('Booking storage is unavailable.') from exc

    def write_all(self, bookings: Iterable[Booking]) -> None:
        with self._exclusive():
            self._write(list(bookings))

    def _write(self, bookings: list[Booking]) -> None:
        payload = json.dumps([booking.to_record() for booking in bookings], indent=2)
        temp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                'w',
                encoding='utf-8',
                dir=self.path.parent,
                prefix=f'.{self.path.name}.',
                suffix='.tmp',
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(payload)
                handle.write('\n')
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, self.path)
        except OSError as exc:
            if temp_name and os.path.exists(temp_name):
                os.unlink(temp_name)
            logger.exception('Could not write ledger file %s', self.path)
            raise LedgerUnavailable('Booking storage is unavailable.') from exc

    def append_unique(self, booking: Booking) -> Booking:
        """Append ``booking`` unless its date (or payment reference) is already taken."""
        with self._exclusive():
            bookings = self.read_all()

            for existing in bookings:
                if existing.date == booking.date:
                    raise DateAlreadyBooked(existing=existing)
                if booking.payment_reference and existing.payment_reference == booking.payment_reference:
                    raise DateAlreadyBooked('This payment has already been used for a booking.', existing=existing)

            bookings.append(booking)
            self._write(bookings)

        logger.info('Recorded %s booking for %s', booking.method.value, booking.date.isoformat())
        return booking

    def find_by_date(self, day: date) -> Booking | None:
        for booking in self.read_all():
            if booking.date == day:
                return booking
        return None

    def booked_dates(self) -> set[date]:
        return {booking.date for booking in self.read_all()}

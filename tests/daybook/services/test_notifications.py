import logging
from datetime import date, datetime, timezone

import pytest

from daybook.models.booking import Booking, PaymentMethod
from daybook.services.notifications import EmailNotifier


class FakeSMTP:
    instances: list['FakeSMTP'] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.logged_in_as = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, username, password):
        self.logged_in_as = username

    def sendmail(self, sender, recipients, message):
        self.sent.append((sender, recipients, message))


@pytest.fixture
def fake_smtp(monkeypatch: pytest.MonkeyPatch):
    FakeSMTP.instances = []
    monkeypatch.setattr('daybook.services.notifications.smtplib.SMTP', FakeSMTP)
    return FakeSMTP


def make_notifier(**overrides) -> EmailNotifier:
    settings = {
        'host': 'smtp.example.com',
        'port': 587,
        'username': 'site@example.com',
        'password': 'app-password',
        'sender': '"Flawless Finish Website" <site@example.com>',
        'operator_address': 'owner@example.com',
        'business_name': 'Flawless Finish',
        'timeout': 10,
    }
    settings.update(overrides)
    return EmailNotifier(**settings)


def make_booking(**overrides) -> Booking:
    fields = {
        'date': date(2025, 6, 10),
        'method': PaymentMethod.CARD,
        'deposit': 25000,
        'payment_reference': 'pi_123',
        'created_at': datetime(2025, 6, 2, tzinfo=timezone.utc),
        'name': 'Jane <b>Doe</b>',
        'phone': '760-555-0100',
    }
    fields.update(overrides)
    return Booking(**fields)


def test_notify_booking_emails_operator(fake_smtp) -> None:
    make_notifier().notify_booking(make_booking())

    assert len(fake_smtp.instances) == 1
    server = fake_smtp.instances[0]
    assert server.timeout == 10
    assert server.started_tls
    assert server.logged_in_as == 'site@example.com'

    sender, recipients, message = server.sent[0]
    assert sender == 'site@example.com'
    assert recipients == ['owner@example.com']
    assert 'New Booking' in message
    assert 'Tue, Jun 10' in message
    assert '$250.00' in message
    assert 'Jane &lt;b&gt;Doe&lt;/b&gt;' in message
    assert '<b>Doe</b>' not in message.split('\n\n', 1)[1]


def test_notify_booking_confirms_to_customer_when_email_given(fake_smtp) -> None:
    make_notifier().notify_booking(make_booking(
        email='jane@example.com', method=PaymentMethod.CASH, deposit=0, payment_reference=None,
    ))

    recipients = [server.sent[0][1] for server in fake_smtp.instances]
    assert recipients == [['owner@example.com'], ['jane@example.com']]


def test_notify_booking_skips_when_credentials_missing(fake_smtp) -> None:
    make_notifier(password='').notify_booking(make_booking())

    assert fake_smtp.instances == []


def test_notify_booking_swallows_transport_failure(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    def unreachable(*args, **kwargs):
        raise ConnectionRefusedError('Connection refused')

    monkeypatch.setattr('daybook.services.notifications.smtplib.SMTP', unreachable)

    with caplog.at_level(logging.ERROR, logger='daybook.services.notifications'):
        make_notifier().notify_booking(make_booking(email='jane@example.com'))

    assert 'Operator notification failed' in caplog.text
    assert 'Customer confirmation failed' in caplog.text


def test_notify_unbooked_payment_alerts_operator(fake_smtp) -> None:
    make_notifier().notify_unbooked_payment(
        'pi_999', make_booking(payment_reference='pi_999'), 'the day is no longer bookable'
    )

    _, recipients, message = fake_smtp.instances[0].sent[0]
    assert recipients == ['owner@example.com']
    assert 'Refund needed' in message
    assert 'pi_999' in message
    assert 'the day is no longer bookable' in message


def test_verify_connection_reports_missing_credentials() -> None:
    assert 'not configured' in make_notifier(username='', operator_address='').verify_connection()


def test_verify_connection_logs_in(fake_smtp) -> None:
    assert make_notifier().verify_connection() is None
    assert fake_smtp.instances[0].logged_in_as == 'site@example.com'

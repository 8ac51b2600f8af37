"""
Booking email notifications over SMTP.

Every public method here is best effort: failures are logged and swallowed so
a bounced email never affects a booking that is already on the ledger.
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from typing import Optional, Union

from daybook.email_templates import (
    booking_confirmation_customer_template,
    format_money,
    new_booking_operator_template,
    unbooked_payment_alert_template,
)
from daybook.models.booking import Booking, PaymentMethod
from daybook.services.availability import format_day_label

logger = logging.getLogger(__name__)

METHOD_LABELS = {
    PaymentMethod.CARD: "Card deposit",
    PaymentMethod.CASH: "Cash reservation",
}


class EmailNotifier:
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        operator_address: str,
        business_name: str,
        currency: str = "usd",
        timeout: float = 10,
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.operator_address = operator_address or username
        self.business_name = business_name
        self.currency = currency
        self.timeout = timeout
        self.use_tls = use_tls

    @property
    def enabled(self) -> bool:
        return bool(self.username and self.password and self.operator_address)

    def notify_booking(self, booking: Booking) -> None:
        """Tell the operator about ``booking`` and confirm it to the customer if they left an email."""
        if not self.enabled:
            logger.info("Email skipped - email credentials missing.")
            return

        date_label = format_day_label(booking.date)
        method_label = METHOD_LABELS[booking.method]
        deposit_label = format_money(booking.deposit, self.currency)

        try:
            self.send(
                to=self.operator_address,
                subject=f"New Booking - {booking.name} - {date_label}",
                html_content=new_booking_operator_template(
                    business_name=self.business_name,
                    customer_name=booking.name or "N/A",
                    customer_phone=booking.phone or "N/A",
                    customer_email=booking.email or "Not provided",
                    date_label=date_label,
                    vehicle=booking.vehicle or "Not specified",
                    method_label=method_label,
                    deposit_label=deposit_label,
                    payment_reference=booking.payment_reference or "N/A",
                    deposit_paid=booking.deposit > 0,
                ),
            )
        except Exception:
            logger.exception("Operator notification failed for booking on %s", booking.date.isoformat())

        if not booking.email:
            return

        try:
            self.send(
                to=booking.email,
                subject=f"Your booking with {self.business_name} - {date_label}",
                html_content=booking_confirmation_customer_template(
                    business_name=self.business_name,
                    customer_name=booking.name,
                    date_label=date_label,
                    method_label=method_label,
                    deposit_label=deposit_label,
                ),
            )
        except Exception:
            logger.exception("Customer confirmation failed for booking on %s", booking.date.isoformat())

    def notify_unbooked_payment(
        self, payment_reference: str, booking: Booking, reason: str = "the day was already taken"
    ) -> None:
        """Alert the operator that ``payment_reference`` was captured without a booking."""
        if not self.enabled:
            logger.warning(
                "Email skipped - cannot alert operator about captured payment %s", payment_reference
            )
            return

        try:
            self.send(
                to=self.operator_address,
                subject=f"Refund needed - payment {payment_reference}",
                html_content=unbooked_payment_alert_template(
                    business_name=self.business_name,
                    payment_reference=payment_reference,
                    date_label=format_day_label(booking.date),
                    customer_name=booking.name or "N/A",
                    customer_phone=booking.phone or "N/A",
                    deposit_label=format_money(booking.deposit, self.currency),
                    reason=reason,
                ),
            )
        except Exception:
            logger.exception("Refund alert failed for payment %s", payment_reference)

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            context = ssl.create_default_context()
            return smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout)

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        if self.use_tls:
            server.starttls(context=ssl.create_default_context())
        return server

    def send(self, to: Union[str, list[str]], subject: str, html_content: str) -> None:
        recipients = [to] if isinstance(to, str) else to

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)
        msg.attach(MIMEText(html_content, "html"))

        envelope_sender = parseaddr(self.sender)[1] or self.username
        with self._connect() as server:
            server.login(self.username, self.password)
            server.sendmail(envelope_sender, recipients, msg.as_string())

        logger.info("Email sent to %s: %s", ", ".join(recipients), subject)

    def verify_connection(self) -> Optional[str]:
        """Log in to the SMTP server. Returns an error message, or None when it works."""
        if not self.enabled:
            return "Email credentials not configured (set EMAIL_USER, EMAIL_PASS and OWNER_EMAIL)."
        try:
            with self._connect() as server:
                server.login(self.username, self.password)
        except (OSError, smtplib.SMTPException) as exc:
            return str(exc) or exc.__class__.__name__
        return None

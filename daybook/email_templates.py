"""
HTML email bodies for booking notifications.

All values are escaped before interpolation; customer input ends up here.
"""

from html import escape

THEME = {
    "primary": "#FFD700",
    "dark": "#0a0f1a",
    "muted": "#f8f9fa",
    "success_bg": "#e8f5e8",
    "success_fg": "#2e7d32",
    "alert_bg": "#fdecea",
    "alert_fg": "#b71c1c",
}


def format_money(amount_minor_units: int, currency: str = "usd") -> str:
    symbol = "$" if currency.lower() == "usd" else f"{currency.upper()} "
    return f"{symbol}{amount_minor_units / 100:.2f}"


def _row(label: str, value: str, last: bool = False) -> str:
    border = "" if last else "border-bottom: 1px solid #ddd;"
    return (
        "<tr>"
        f'<td style="padding: 10px; {border} font-weight: bold; width: 30%;">{escape(label)}:</td>'
        f'<td style="padding: 10px; {border}">{escape(value)}</td>'
        "</tr>"
    )


def _layout(business_name: str, heading: str, body: str) -> str:
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: {THEME['primary']}; background: {THEME['dark']}; padding: 20px; margin: 0; text-align: center;">
    {escape(heading)}
  </h2>
  <div style="background: {THEME['muted']}; padding: 30px;">
    {body}
  </div>
  <div style="background: {THEME['dark']}; color: #fff; padding: 20px; text-align: center; font-size: 12px;">
    <p style="margin: 0;">{escape(business_name)}</p>
    <p style="margin: 5px 0 0 0;">This email was sent automatically from the website booking system.</p>
  </div>
</div>
"""


def new_booking_operator_template(
    business_name: str,
    customer_name: str,
    customer_phone: str,
    customer_email: str,
    date_label: str,
    vehicle: str,
    method_label: str,
    deposit_label: str,
    payment_reference: str,
    deposit_paid: bool,
) -> str:
    rows = "".join(
        [
            _row("Name", customer_name),
            _row("Phone", customer_phone),
            _row("Email", customer_email),
            _row("Date", date_label),
            _row("Vehicle", vehicle),
            _row("Payment", method_label),
            _row("Reference", payment_reference),
            _row("Deposit", deposit_label, last=True),
        ]
    )
    if deposit_paid:
        status_block = f"""
    <div style="margin-top: 30px; padding: 20px; background: {THEME['success_bg']}; border-left: 4px solid #4CAF50;">
      <h4 style="margin: 0 0 10px 0; color: {THEME['success_fg']};">Deposit Received</h4>
      <p style="margin: 0; color: {THEME['success_fg']};">The customer paid the {escape(deposit_label)} deposit to secure this day.</p>
    </div>"""
    else:
        status_block = f"""
    <div style="margin-top: 30px; padding: 20px; background: {THEME['muted']}; border-left: 4px solid {THEME['primary']};">
      <h4 style="margin: 0 0 10px 0;">Cash Reservation</h4>
      <p style="margin: 0;">No deposit was taken. Payment is due in cash on the day.</p>
    </div>"""

    body = f"""
    <h3 style="color: {THEME['dark']}; margin-top: 0;">Customer Information</h3>
    <table style="width: 100%; border-collapse: collapse;">{rows}</table>
    {status_block}
    <div style="margin-top: 20px; text-align: center;">
      <a href="tel:{escape(customer_phone, quote=True)}" style="background: {THEME['primary']}; color: {THEME['dark']}; padding: 12px 24px; text-decoration: none; border-radius: 8px; font-weight: bold; display: inline-block;">
        Call Customer
      </a>
    </div>"""
    return _layout(business_name, "New Booking", body)


def booking_confirmation_customer_template(
    business_name: str,
    customer_name: str,
    date_label: str,
    method_label: str,
    deposit_label: str,
) -> str:
    rows = "".join(
        [
            _row("Date", date_label),
            _row("Payment", method_label),
            _row("Deposit paid", deposit_label, last=True),
        ]
    )
    body = f"""
    <p>Hi {escape(customer_name)},</p>
    <p>Thanks for booking with {escape(business_name)}. Your day is reserved.</p>
    <table style="width: 100%; border-collapse: collapse;">{rows}</table>
    <p style="margin-top: 20px;">We will call you before the appointment to confirm the details.</p>"""
    return _layout(business_name, "Booking Confirmed", body)


def unbooked_payment_alert_template(
    business_name: str,
    payment_reference: str,
    date_label: str,
    customer_name: str,
    customer_phone: str,
    deposit_label: str,
    reason: str = "the day was already taken",
) -> str:
    rows = "".join(
        [
            _row("Payment reference", payment_reference),
            _row("Requested date", date_label),
            _row("Name", customer_name),
            _row("Phone", customer_phone),
            _row("Amount", deposit_label, last=True),
        ]
    )
    body = f"""
    <div style="padding: 20px; background: {THEME['alert_bg']}; border-left: 4px solid {THEME['alert_fg']};">
      <h4 style="margin: 0 0 10px 0; color: {THEME['alert_fg']};">Refund needed</h4>
      <p style="margin: 0; color: {THEME['alert_fg']};">A deposit was captured but {escape(reason)}, so no booking was saved.</p>
    </div>
    <table style="width: 100%; border-collapse: collapse; margin-top: 20px;">{rows}</table>"""
    return _layout(business_name, "Payment Without Booking", body)

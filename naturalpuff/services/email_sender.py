"""Order notification e-mail: admin summary and customer confirmation over SMTP."""
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from naturalpuff.core.config import is_mail_configured, settings
from naturalpuff.services.pricing import format_inr, is_amount

log = logging.getLogger("naturalpuff.email")

REQUIRED_ORDER_FIELDS = ("orderId", "customerName", "amount")


class MailNotConfigured(Exception):
    pass


def missing_order_fields(payload: dict) -> list[str]:
    """Required notification fields that are absent or blank, in declaration order."""
    missing = []
    for name in REQUIRED_ORDER_FIELDS:
        value = payload.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def invalid_order_fields(payload: dict) -> list[str]:
    """Fields that are present but not usable as numbers: amount, item prices and quantities."""
    invalid = []
    if not is_amount(payload.get("amount")):
        invalid.append("amount")
    for i, item in enumerate(payload.get("items") or []):
        quantity = item.get("quantity")
        if quantity is not None and not (is_amount(quantity) and float(quantity) >= 1 and float(quantity).is_integer()):
            invalid.append(f"items[{i}].quantity")
        if item.get("price") is not None and not is_amount(item["price"]):
            invalid.append(f"items[{i}].price")
    return invalid


def admin_address() -> str:
    return (settings.admin_email or settings.smtp_user or "").strip()


def send_email(to: str, subject: str, html_body: str) -> bool:
    """Sends one HTML e-mail over a fresh SMTP connection. True on success."""
    if not is_mail_configured():
        log.warning("SMTP not configured; email not sent to %s", to)
        return False
    host = settings.smtp_host.strip()
    port = int(settings.smtp_port or 587)
    user = (settings.smtp_user or "").strip()
    password = (settings.smtp_password or "").strip()
    from_addr = (settings.smtp_from or user).strip()
    from_name = (settings.smtp_from_name or "").strip()
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{from_name} <{from_addr}>" if from_name else from_addr
    msg["To"] = to
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        if settings.smtp_use_ssl:
            smtp = smtplib.SMTP_SSL(host, port, timeout=15)
        else:
            smtp = smtplib.SMTP(host, port, timeout=15)
        with smtp:
            if settings.smtp_use_tls and not settings.smtp_use_ssl:
                smtp.starttls()
            if user and password:
                smtp.login(user, password)
            smtp.sendmail(from_addr, [to], msg.as_string())
        log.info("Email sent to %s subject=%s", to, subject[:50])
        return True
    except (smtplib.SMTPException, OSError) as e:
        log.exception("Failed to send email to %s: %s", to, e)
        return False


def _items_rows(items: list[dict] | None) -> str:
    rows = []
    for item in items or []:
        name = html.escape(str(item.get("name") or item.get("product_name") or "Item"))
        qty = int(float(item.get("quantity") or 1))
        price = item.get("price")
        price_text = format_inr(price) if price is not None else ""
        rows.append(
            f'<tr><td style="padding:6px 8px;border-bottom:1px solid #eee;">{name}</td>'
            f'<td style="padding:6px 8px;border-bottom:1px solid #eee;text-align:center;">{qty}</td>'
            f'<td style="padding:6px 8px;border-bottom:1px solid #eee;text-align:right;">{price_text}</td></tr>'
        )
    if not rows:
        return ""
    return (
        '<table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="margin:16px 0;font-size:14px;">'
        '<tr><th align="left" style="padding:6px 8px;">Product</th><th style="padding:6px 8px;">Qty</th>'
        '<th align="right" style="padding:6px 8px;">Price</th></tr>' + "".join(rows) + "</table>"
    )


def _wrap(title: str, inner: str) -> str:
    brand = html.escape(settings.smtp_from_name or "Natural Puff")
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>{html.escape(title)}</title>
</head>
<body style="margin:0;padding:0;background-color:#f7f5ef;font-family:'Segoe UI',system-ui,-apple-system,sans-serif;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0">
    <tr>
      <td align="center" style="padding:32px 16px;">
        <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width:560px;background:#ffffff;border-radius:12px;overflow:hidden;">
          <tr>
            <td style="background:#2f6b3a;padding:20px 24px;text-align:center;font-size:18px;font-weight:600;color:#ffffff;">{brand}</td>
          </tr>
          <tr>
            <td style="padding:24px;color:#333333;font-size:15px;line-height:1.6;">{inner}</td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def build_order_notification_html(payload: dict) -> tuple[str, str]:
    """Admin summary: (subject, html_body). Every customer value is escaped."""
    order_id = html.escape(str(payload.get("orderId")))
    name = html.escape(str(payload.get("customerName")))
    email = html.escape(str(payload.get("email") or "Not provided"))
    phone = html.escape(str(payload.get("phone") or "Not provided"))
    amount = format_inr(payload.get("amount"))
    subject = f"New Order #{payload.get('orderId')} - {amount}"
    inner = f"""<h2 style="margin:0 0 16px;font-size:20px;">New order received</h2>
<p style="margin:0;"><strong>Order ID:</strong> {order_id}</p>
<p style="margin:0;"><strong>Customer:</strong> {name}</p>
<p style="margin:0;"><strong>Email:</strong> {email}</p>
<p style="margin:0;"><strong>Phone:</strong> {phone}</p>
<p style="margin:0;"><strong>Amount:</strong> {amount}</p>
{_items_rows(payload.get("items"))}"""
    return subject, _wrap(subject, inner)


def build_order_confirmation_html(payload: dict) -> tuple[str, str]:
    """Customer confirmation: (subject, html_body)."""
    order_id = html.escape(str(payload.get("orderId")))
    name = html.escape(str(payload.get("customerName")))
    amount = format_inr(payload.get("amount"))
    subject = f"Your Natural Puff order #{payload.get('orderId')} is confirmed"
    inner = f"""<p style="margin:0 0 12px;">Hi {name},</p>
<p style="margin:0 0 12px;">Thank you for your order. We have received it and will ship it soon.</p>
<p style="margin:0;"><strong>Order ID:</strong> {order_id}</p>
<p style="margin:0;"><strong>Total:</strong> {amount}</p>
{_items_rows(payload.get("items"))}
<p style="margin:16px 0 0;font-size:13px;color:#777777;">Questions? Just reply to this e-mail.</p>"""
    return subject, _wrap(subject, inner)


def send_order_notification(payload: dict) -> dict:
    """
    Admin summary (must succeed) plus an optional customer confirmation.
    Returns {"admin_sent": bool, "customer_sent": bool | None}.
    Raises MailNotConfigured when SMTP settings are missing.
    """
    if not is_mail_configured():
        raise MailNotConfigured("Email credentials are not configured")
    subject, body = build_order_notification_html(payload)
    admin_sent = send_email(admin_address(), subject, body)
    customer_sent = None
    if admin_sent and payload.get("email"):
        c_subject, c_body = build_order_confirmation_html(payload)
        customer_sent = send_email(str(payload["email"]), c_subject, c_body)
        if not customer_sent:
            log.warning("Customer confirmation not delivered for order %s", payload.get("orderId"))
    return {"admin_sent": admin_sent, "customer_sent": customer_sent}

"""
Email Service
SMTP (primary) with Resend fallback, guarded by a rolling 24-hour recipient quota.

Every delivered email is recorded in the email_transports table; the quota is
500 recipients for personal mail accounts and 2000 for workspace accounts.
"""

import logging
import smtplib
import ssl
from datetime import timedelta
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml2html as mjml_to_html
from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import config
from ..database import SessionLocal
from ..email_templates import new_booking_notification_template
from ..models import EmailTransport, utcnow
from ..shared.timeslots import compute_end_time

logger = logging.getLogger(__name__)

PERSONAL_DAILY_LIMIT = 500
WORKSPACE_DAILY_LIMIT = 2000
QUOTA_WINDOW = timedelta(hours=24)


def _as_list(value) -> list[str]:
    if not value:
        return []
    return [value] if isinstance(value, str) else list(value)


def count_recipients(to=None, cc=None, bcc=None) -> int:
    """Each to/cc/bcc address counts once; an email always counts at least one"""
    count = len(_as_list(to)) + len(_as_list(cc)) + len(_as_list(bcc))
    return count or 1


def get_daily_limit(account_type: Optional[str] = None) -> int:
    account_type = (account_type or config.EMAIL_ACCOUNT_TYPE or "workspace").lower()
    return PERSONAL_DAILY_LIMIT if account_type == "personal" else WORKSPACE_DAILY_LIMIT


def get_recipient_count_last_24_hours(db: Session) -> int:
    since = utcnow() - QUOTA_WINDOW
    total = (
        db.query(func.coalesce(func.sum(EmailTransport.recipient_count), 0))
        .filter(EmailTransport.sent_at >= since)
        .scalar()
    )
    return int(total or 0)


def get_usage_stats(db: Session, daily_limit: Optional[int] = None) -> dict:
    daily_limit = daily_limit if daily_limit is not None else get_daily_limit()
    current = get_recipient_count_last_24_hours(db)
    percentage = (current / daily_limit) * 100 if daily_limit > 0 else 0
    return {
        "currentCount": current,
        "dailyLimit": daily_limit,
        "remaining": max(0, daily_limit - current),
        "percentageUsed": round(percentage, 2),
    }


def check_limit(db: Session, recipient_count: int, daily_limit: Optional[int] = None) -> dict:
    stats = get_usage_stats(db, daily_limit)
    return {
        "canSend": stats["currentCount"] + recipient_count <= stats["dailyLimit"],
        **stats,
        "requestedCount": recipient_count,
    }


def record_email_send(db: Session, recipient_count: int, email_type: str = "general") -> EmailTransport:
    record = EmailTransport(recipient_count=recipient_count, email_type=email_type, sent_at=utcnow())
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    errors = getattr(result, "errors", None) or (result.get("errors") if isinstance(result, dict) else None)
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    html = getattr(result, "html", None)
    if html is None and isinstance(result, dict):
        html = result.get("html", "")
    return html if html is not None else str(result)


def smtp_configured() -> bool:
    return bool(config.SMTP_HOST and config.SMTP_USERNAME and config.SMTP_PASSWORD)


def send_via_smtp(
    to: list[str],
    subject: str,
    html_content: str,
    from_address: str,
    cc: Optional[list[str]] = None,
    bcc: Optional[list[str]] = None,
) -> dict:
    """Send email via the configured SMTP server"""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    if cc:
        msg["Cc"] = ", ".join(cc)
    msg.attach(MIMEText(html_content, "html"))

    recipients = to + (cc or []) + (bcc or [])

    if config.SMTP_PORT == 465:
        context = ssl.create_default_context()
        server = smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=30)
        if config.SMTP_USE_TLS:
            server.starttls(context=ssl.create_default_context())

    try:
        server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD)
        server.sendmail(from_address.split("<")[-1].rstrip(">"), recipients, msg.as_string())
    finally:
        server.quit()

    logger.info(f"✅ SMTP email sent successfully via {config.SMTP_HOST}")
    return {"id": f"smtp-{utcnow().timestamp()}"}


def send_via_resend(
    to: list[str],
    subject: str,
    html_content: str,
    from_address: str,
    cc: Optional[list[str]] = None,
    bcc: Optional[list[str]] = None,
) -> dict:
    resend.api_key = config.RESEND_API_KEY
    email_data = {"from": from_address, "to": to, "subject": subject, "html": html_content}
    if cc:
        email_data["cc"] = cc
    if bcc:
        email_data["bcc"] = bcc
    response = resend.Emails.send(email_data)
    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


def _classify_smtp_error(error: Exception) -> tuple[str, str]:
    if isinstance(error, smtplib.SMTPAuthenticationError):
        return "AUTH_ERROR", "Email service authentication failed. Please check email configuration."
    if isinstance(error, smtplib.SMTPRecipientsRefused) or (
        isinstance(error, smtplib.SMTPResponseException) and error.smtp_code == 454
    ):
        return "SMTP_LIMIT_EXCEEDED", f"SMTP error: Too many recipients. {error}"
    if isinstance(error, (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected, ConnectionError, TimeoutError)):
        return "CONNECTION_ERROR", "Failed to connect to email service. Please try again later."
    return "SEND_ERROR", str(error) or "Failed to send email"


async def send_email(
    db: Session,
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    email_type: str = "general",
    cc: Union[str, list[str], None] = None,
    bcc: Union[str, list[str], None] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through SMTP (if configured) or Resend (fallback), within the daily quota

    Returns:
        {"success": True, "recipientCount": n, "limitInfo": {...}} on delivery, otherwise
        {"success": False, "code": "...", "error": "..."}
    """
    to_list, cc_list, bcc_list = _as_list(to), _as_list(cc), _as_list(bcc)
    recipient_count = count_recipients(to_list, cc_list, bcc_list)

    if not config.EMAIL_ENABLED or not (smtp_configured() or config.RESEND_API_KEY):
        logger.info(f"📭 Email not configured - skipping '{subject}' to {to_list}")
        return {"success": False, "code": "NOT_CONFIGURED", "error": "Email service not configured"}

    limit_check = check_limit(db, recipient_count)
    if not limit_check["canSend"]:
        message = (
            f"Email sending limit exceeded. Current usage: {limit_check['currentCount']}/"
            f"{limit_check['dailyLimit']}. Requested: {recipient_count}. "
            f"Remaining: {limit_check['remaining']}. Please wait for the 24-hour rolling window to reset."
        )
        logger.warning(f"⚠️ {message}")
        return {"success": False, "code": "LIMIT_EXCEEDED", "error": message, "limitInfo": limit_check}

    html_content = compile_mjml_to_html(mjml_content)
    sender = from_address or config.EMAIL_FROM_ADDRESS

    sent = False
    if smtp_configured():
        try:
            logger.info(f"📧 Sending email via SMTP: {config.SMTP_HOST}")
            send_via_smtp(to_list, subject, html_content, sender, cc_list, bcc_list)
            sent = True
        except (smtplib.SMTPException, OSError) as e:
            code, message = _classify_smtp_error(e)
            if not config.RESEND_API_KEY:
                logger.error(f"❌ SMTP send failed ({code}): {e}")
                return {"success": False, "code": code, "error": message}
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not sent:
        try:
            logger.info(f"📧 Sending email via Resend to: {to_list}")
            send_via_resend(to_list, subject, html_content, sender, cc_list, bcc_list)
        except Exception as e:
            logger.error(f"❌ Email send error to {to_list}: {e}")
            return {"success": False, "code": "SEND_ERROR", "error": str(e) or "Failed to send email"}

    record_email_send(db, recipient_count, email_type)
    stats = get_usage_stats(db)
    logger.info(f"✅ Email sent ({email_type}) to {recipient_count} recipient(s), {stats['remaining']} left today")
    return {"success": True, "recipientCount": recipient_count, "limitInfo": stats}


async def send_new_booking_notification(booking: dict, appointment_date: str) -> dict:
    """Notify the salon admin about a new booking; runs as a background task with its own session"""
    if not config.ADMIN_NOTIFICATION_EMAIL:
        logger.info("📭 ADMIN_NOTIFICATION_EMAIL not set - skipping booking notification")
        return {"success": False, "code": "NOT_CONFIGURED", "error": "No admin notification address"}

    service = booking.get("service") or {}
    mjml_content = new_booking_notification_template(
        customer_name=f"{booking.get('firstName', '')} {booking.get('lastName', '')}".strip(),
        customer_email=booking.get("email"),
        customer_phone=booking.get("phone"),
        service_title=service.get("title"),
        appointment_date=appointment_date,
        start_time=booking.get("startTime"),
        end_time=compute_end_time(booking.get("startTime"), service),
        add_ons=[a.get("title") for a in service.get("AddOns") or [] if a.get("title")],
        notes=booking.get("AdditionalNotes"),
    )

    db = SessionLocal()
    try:
        return await send_email(
            db,
            to=config.ADMIN_NOTIFICATION_EMAIL,
            subject=f"New booking: {service.get('title')} on {appointment_date}",
            mjml_content=mjml_content,
            email_type="booking",
        )
    finally:
        db.close()

# core/emailer.py
import os
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from .logger import get_logger

logger = get_logger(__name__)

EMAIL_FROM = os.getenv("EMAIL_FROM", "").strip()
SMTP_HOST = os.getenv("SMTP_HOST", "").strip()
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "").strip()
SMTP_PASS = os.getenv("SMTP_PASS", "").strip()
SMTP_USE_SSL = os.getenv("SMTP_USE_SSL", "false").lower() == "true"
SMTP_TIMEOUT = int(os.getenv("SMTP_TIMEOUT", "30"))

# Sync failure alert recipients (comma or semicolon separated)
_ALERT_EMAIL_TO_RAW = os.getenv("ALERT_EMAIL_TO", "").strip()

SUBJECT_PREFIX = "[StockSync]"


def get_alert_recipients() -> list[str]:
    if not _ALERT_EMAIL_TO_RAW:
        return []
    parts = [p.strip() for p in _ALERT_EMAIL_TO_RAW.replace(";", ",").split(",")]
    return [p for p in parts if p]


def _build_message(subject: str, html_body: str, text_body: str | None, recipients: list[str]) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["From"] = EMAIL_FROM
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject

    if not text_body:
        text_body = "HTML capable email client required to view this alert."

    msg.attach(MIMEText(text_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


def send_email(
    subject: str,
    html_body: str,
    text_body: str | None,
    recipients: list[str],
):
    if not recipients:
        logger.warning("No recipients for email '%s'; skipping send.", subject)
        return

    if not (EMAIL_FROM and SMTP_HOST):
        logger.warning(
            "Email not configured (EMAIL_FROM/SMTP_HOST); skipping email: %s",
            subject,
        )
        return

    msg = _build_message(subject, html_body, text_body, recipients)

    if SMTP_USE_SSL:
        server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT)

    try:
        if not SMTP_USE_SSL:
            server.starttls()
        if SMTP_USER:
            server.login(SMTP_USER, SMTP_PASS)
        server.sendmail(EMAIL_FROM, recipients, msg.as_string())
        logger.info("Email sent to %s: %s", recipients, subject)
    finally:
        try:
            server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.debug("SMTP quit failed: %s", e)


def send_alert(subject: str, html_body: str, text_body: str | None) -> None:
    send_email(f"{SUBJECT_PREFIX} {subject}", html_body, text_body, get_alert_recipients())

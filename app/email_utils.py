"""
Small SMTP helpers used by the cold email service.
"""
from __future__ import annotations

import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Optional

from core import config


def _effective_from() -> str:
    if "gmail" in (config.SMTP_SERVER or "").lower() and config.EMAIL_USER:
        return config.EMAIL_USER
    return config.EMAIL_FROM or config.EMAIL_USER or ""


def email_configured() -> bool:
    return bool(config.EMAIL_USER and config.EMAIL_PASSWORD)


def build_message(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    attachment: Optional[Path] = None,
) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = _effective_from()
    msg["To"] = to_email

    alternative = MIMEMultipart("alternative")
    alternative.attach(MIMEText(body, "plain", "utf-8"))
    if html_body:
        alternative.attach(MIMEText(html_body, "html", "utf-8"))
    msg.attach(alternative)

    if attachment and Path(attachment).exists():
        part = MIMEApplication(Path(attachment).read_bytes(), Name=Path(attachment).name)
        part["Content-Disposition"] = f'attachment; filename="{Path(attachment).name}"'
        msg.attach(part)
    return msg


def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    attachment: Optional[Path] = None,
) -> None:
    """Send one message over SMTP with STARTTLS. Raises on any failure."""
    if not email_configured():
        raise RuntimeError("Email credentials not configured. Set EMAIL_USER and EMAIL_PASSWORD.")

    msg = build_message(to_email, subject, body, html_body=html_body, attachment=attachment)
    with smtplib.SMTP(config.SMTP_SERVER, config.SMTP_PORT) as server:
        server.starttls()
        server.login(config.EMAIL_USER, config.EMAIL_PASSWORD)
        server.sendmail(msg["From"], [to_email], msg.as_string())

"""SMTP delivery for account mail."""
import os
import smtplib
from email.mime.text import MIMEText

from flask import current_app
from markupsafe import escape

from background_jobs import start_app_context_job


def _send_email(to_addr, subject, body, html_body=None):
    """Lightweight SMTP sender using environment variables."""
    host = os.environ.get('SMTP_HOST')
    port = int(os.environ.get('SMTP_PORT', 587))
    user = os.environ.get('SMTP_USER')
    password = os.environ.get('SMTP_PASSWORD')
    from_addr = os.environ.get('SMTP_FROM') or user
    if not host or not from_addr:
        current_app.logger.warning("SMTP host/from missing; email not sent")
        return False

    if html_body:
        msg = MIMEText(html_body, 'html')
    else:
        msg = MIMEText(body, 'plain')
    msg['Subject'] = subject
    msg['From'] = from_addr
    msg['To'] = to_addr

    try:
        with smtplib.SMTP(host, port) as server:
            server.starttls()
            if user and password:
                server.login(user, password)
            server.sendmail(from_addr, [to_addr], msg.as_string())
        return True
    except (smtplib.SMTPException, OSError) as e:
        current_app.logger.error(f"SMTP send failed: {e}")
        return False


def build_password_reset_html(reset_url, expires_minutes=60):
    return (
        "<p>You requested a password reset for your block planner account.</p>"
        f'<p><a href="{escape(reset_url)}">Click here to reset your password</a></p>'
        f"<p>This link will expire in {expires_minutes} minutes.</p>"
    )


def send_password_reset(to_addr, reset_url):
    expires_minutes = current_app.config.get('PASSWORD_RESET_MAX_AGE', 3600) // 60
    body = f"Reset your password: {reset_url}\nThis link will expire in {expires_minutes} minutes."
    return _send_email(
        to_addr,
        'Password Reset Request',
        body,
        html_body=build_password_reset_html(reset_url, expires_minutes),
    )


def send_password_reset_async(app, to_addr, reset_url):
    return start_app_context_job(app, send_password_reset, args=(to_addr, reset_url))

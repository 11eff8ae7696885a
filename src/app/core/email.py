"""
Email Service using Resend

Handles sending emails for the admissions flow.
"""

import asyncio
import logging
from datetime import datetime
from html import escape

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)

# Initialize Resend with API key
resend.api_key = settings.resend_api_key

# Configurations
EMAIL_FROM = settings.email_from
SCHOOL_NAME = settings.school_name
FRONTEND_URL = settings.frontend_url

_BASE_STYLES = """
            body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
            .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
            .header { color: #4c51bf; margin-bottom: 24px; }
            .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
"""


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": EMAIL_FROM,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


async def send_otp_email(
    to_email: str,
    recipient_name: str | None,
    application_id: str,
    otp: str,
    expiry_minutes: int,
) -> bool:
    """Send the email verification code to an applicant."""
    # Escape user inputs to prevent XSS
    safe_name = escape(recipient_name or "Applicant")
    safe_application_id = escape(application_id)
    safe_school_name = escape(SCHOOL_NAME)

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            {_BASE_STYLES}
            .otp-box {{ background-color: #f8f9ff; border: 2px dashed #4c51bf; padding: 20px; border-radius: 8px; text-align: center; margin: 24px 0; }}
            .otp-code {{ font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #4c51bf; margin: 10px 0; }}
            .warning {{ background-color: #fef3c7; border: 1px solid #f59e0b; padding: 16px; border-radius: 8px; margin: 16px 0; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Verify Your Email</h1>

            <p>Hello {safe_name},</p>

            <p>Thank you for applying to <strong>{safe_school_name}</strong>.</p>

            <p>Your application ID is: <strong>{safe_application_id}</strong></p>

            <p>Enter the code below to verify your email address:</p>

            <div class="otp-box">
                <p style="margin: 0; color: #6b7280; font-size: 14px;">Your Verification Code</p>
                <div class="otp-code">{otp}</div>
                <p style="margin: 0; color: #6b7280; font-size: 12px;">This code expires in {expiry_minutes} minutes</p>
            </div>

            <div class="warning">
                <strong>The code can be used once.</strong> If you didn't request it, you can safely ignore this email.
            </div>

            <div class="footer">
                <p>&copy; {datetime.now().year} {safe_school_name}. This is an automated email, please do not reply.</p>
            </div>
        </div>
    </body>
    </html>
    """
    return await send_email(
        to_email=to_email,
        subject=f"Verify Your Email - Application {safe_application_id}",
        html_content=html_content,
    )


async def send_admin_status_email(
    to_email: str,
    recipient_name: str | None,
    application_id: str,
    status: str,
    remarks: str | None = None,
) -> bool:
    """Notify an applicant that their application was approved or rejected."""
    is_approved = status.lower() == "approved"
    status_text = "Approved" if is_approved else status.replace("_", " ").capitalize()
    status_color = "#10b981" if is_approved else "#ef4444"

    safe_name = escape(recipient_name or "Applicant")
    safe_application_id = escape(application_id)
    safe_school_name = escape(SCHOOL_NAME)

    remarks_html = ""
    if remarks:
        remarks_html = f"""
            <div class="remarks-box">
                <p><strong>Remarks from the Admissions Team:</strong></p>
                <p>{escape(remarks)}</p>
            </div>
        """

    if is_approved:
        next_steps = """
            <p><strong>Next steps:</strong></p>
            <ol>
                <li>Complete the fee payment process</li>
                <li>Submit any additional required documents</li>
                <li>Attend the orientation session (details will be sent separately)</li>
            </ol>
        """
    else:
        next_steps = """
            <p>If you have any questions regarding your application, please contact the admissions office.</p>
        """

    status_url = f"{FRONTEND_URL}/admissions/track?application_id={safe_application_id}"
    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            {_BASE_STYLES}
            .status-box {{ padding: 16px; border-radius: 8px; margin: 16px 0; text-align: center; border: 2px solid {status_color}; }}
            .status-text {{ font-size: 24px; font-weight: bold; color: {status_color}; }}
            .remarks-box {{ background-color: #fef3c7; border-left: 4px solid #f59e0b; padding: 16px; border-radius: 4px; margin: 16px 0; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">Application Status Update</h1>

            <p>Dear {safe_name},</p>

            <p>We have reviewed your admission application <strong>{safe_application_id}</strong>.</p>

            <div class="status-box">
                <div class="status-text">{status_text.upper()}</div>
            </div>

            {remarks_html}

            {next_steps}

            <p>You can track your application at <a href="{status_url}">{status_url}</a>.</p>

            <div class="footer">
                <p>&copy; {datetime.now().year} {safe_school_name}. This is an automated email, please do not reply.</p>
            </div>
        </div>
    </body>
    </html>
    """
    return await send_email(
        to_email=to_email,
        subject=f"Application {status_text} - {safe_application_id}",
        html_content=html_content,
    )

import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formatdate
from html import escape

from formbuilder.core.config.settings import Settings, get_settings

logger = logging.getLogger("formbuilder.email")


class Notifier:
    """
    Best-effort SMTP mailer for invitations and submission receipts.

    Every send method returns True on success and False on failure; delivery
    problems are logged and never raised to the caller.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def send_email(self, to_email: str, subject: str, html_content: str) -> bool:
        """
        Send an HTML email using SMTP

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML body of the email
        """
        if not self.settings.EMAIL_ENABLED:
            logger.warning("Email delivery disabled, skipping message to %s", to_email)
            return False
        try:
            msg = MIMEMultipart()
            msg['From'] = self.settings.DEFAULT_FROM_EMAIL
            msg['To'] = to_email
            msg['Subject'] = subject
            msg['Date'] = formatdate(localtime=True)

            # Attach HTML content
            msg.attach(MIMEText(html_content, 'html'))

            with smtplib.SMTP(self.settings.EMAIL_HOST, self.settings.EMAIL_PORT, timeout=30) as server:
                if self.settings.EMAIL_USE_TLS:
                    server.starttls()
                if self.settings.EMAIL_HOST_USER:
                    server.login(self.settings.EMAIL_HOST_USER, self.settings.EMAIL_HOST_PASSWORD)
                server.sendmail(self.settings.EMAIL_HOST_USER or self.settings.DEFAULT_FROM_EMAIL, to_email, msg.as_string())

            logger.info("Sent '%s' to %s", subject, to_email)
            return True
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to_email)
            return False

    def send_invitation(self, to_email: str, form_title: str, link: str) -> bool:
        return self.send_email(
            to_email,
            f"You are invited to fill the form: {form_title}",
            create_invitation_email(form_title, link),
        )

    def send_acknowledgement(self, to_email: str, form_title: str) -> bool:
        return self.send_email(
            to_email,
            f"Your response to {form_title} was received",
            create_acknowledgement_email(form_title),
        )


def get_notifier() -> Notifier:
    return Notifier(get_settings())


def create_invitation_email(form_title: str, link: str) -> str:
    """
    Create HTML email content for a form invitation
    """
    title = escape(form_title)
    href = escape(link, quote=True)
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <title>Form invitation</title>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background-color: #4F46E5; color: white; padding: 10px; text-align: center; }}
            .content {{ padding: 20px; background-color: #f9f9f9; }}
            .button {{ display: inline-block; padding: 12px 20px; background-color: #4F46E5;
                      color: white; text-decoration: none; border-radius: 4px; }}
            .footer {{ font-size: 12px; text-align: center; margin-top: 20px; color: #555; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h2>You've been invited to fill a form</h2>
            </div>
            <div class="content">
                <p>Hello,</p>
                <p>You have been asked to respond to <strong>{title}</strong>.</p>
                <p><a class="button" href="{href}">Open the form</a></p>
                <p>This link is personal and can only be used to submit once.</p>
            </div>
            <div class="footer">
                <p>This is an automated message, please do not reply directly to this email.</p>
            </div>
        </div>
    </body>
    </html>
    """


def create_acknowledgement_email(form_title: str) -> str:
    """
    Create HTML email content confirming a submission
    """
    title = escape(form_title)
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <title>Response received</title>
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
        <p>Hello,</p>
        <p>Thank you, your response to <strong>{title}</strong> has been recorded.</p>
        <p style="font-size: 12px; color: #555;">This is an automated message, please do not reply directly to this email.</p>
    </body>
    </html>
    """

"""Email delivery through SendGrid"""

import asyncio
from typing import Optional

from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from backend.app.core.config import settings
from backend.app.core.exceptions import NotificationException
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

REGISTRATION_SUBJECT = "Registration Successful - Academic Affairs Central Team"


class EmailService:
    """Builds and sends the applicant confirmation email"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        sender_name: Optional[str] = None
    ):
        self.api_key = api_key if api_key is not None else settings.SENDGRID_API_KEY
        self.sender = sender or settings.MAIL_FROM
        self.sender_name = sender_name or settings.MAIL_FROM_NAME

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.sender)

    def build_registration_email(self, email: str, full_name: str) -> Mail:
        """
        Build the confirmation message for a new applicant

        Args:
            email: Recipient address
            full_name: Applicant name used in the greeting

        Returns:
            Message with plain-text and HTML content
        """
        return Mail(
            from_email=(self.sender, self.sender_name),
            to_emails=email,
            subject=REGISTRATION_SUBJECT,
            plain_text_content=(
                f"Dear {full_name},\n\n"
                "Thank you for registering for the Student Leadership Program. "
                "Your application has been received and is now under review.\n\n"
                "We will contact you once the review is complete.\n\n"
                "Regards,\n"
                "Academic Affairs Central Team\n"
            ),
            html_content=(
                f"<p>Dear {full_name},</p>"
                "<p>Thank you for registering for the Student Leadership Program. "
                "Your application has been received and is now under review.</p>"
                "<p>We will contact you once the review is complete.</p>"
                "<p>Regards,<br>Academic Affairs Central Team</p>"
            )
        )

    def _deliver(self, message: Mail) -> int:
        client = SendGridAPIClient(api_key=self.api_key)
        response = client.send(message)
        return response.status_code

    async def send_registration_email(self, email: str, full_name: str) -> None:
        """
        Send the confirmation email

        The SendGrid client is synchronous, so the call runs in a worker thread.

        Raises:
            NotificationException: If mail is not configured or delivery fails
        """
        if not self.is_configured:
            raise NotificationException("Mail delivery is not configured")

        message = self.build_registration_email(email, full_name)
        try:
            status_code = await asyncio.to_thread(self._deliver, message)
        except (HTTPError, OSError) as e:
            raise NotificationException(str(e)) from e

        logger.info(f"Registration email sent to {email} (status {status_code})")

"""
Email service for sending notifications
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Callable, List, Optional, Union

from taps.utils.exceptions import ConfigurationError, EmailError
from taps.utils.validators import parse_emails
from taps.workflow.results import NotificationResult

logger = logging.getLogger(__name__)


class EmailService:
    """SMTP notification channel"""

    def __init__(self, server: str, port: int, username: Optional[str], password: Optional[str],
                 use_tls: bool = True, timeout: int = 10, from_name: str = 'TAPS System',
                 reply_to: Optional[str] = None, sender_settings: Optional[Callable] = None):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.from_name = from_name
        self.reply_to = reply_to
        # Callable returning the current NotificationSettings (from_name, reply_to)
        self.sender_settings = sender_settings

    @classmethod
    def from_config(cls, config, sender_settings: Optional[Callable] = None) -> "EmailService":
        """Build from a Flask config mapping"""
        return cls(
            sender_settings=sender_settings,
            server=config.get('MAIL_SERVER', 'smtp.office365.com'),
            port=config.get('MAIL_PORT', 587),
            username=config.get('MAIL_USERNAME'),
            password=config.get('MAIL_PASSWORD'),
            use_tls=config.get('MAIL_USE_TLS', True),
            timeout=config.get('MAIL_TIMEOUT', 10),
        )

    def send(self, to: Union[str, List[str]], subject: str, html_body: str,
             text_body: Optional[str] = None) -> NotificationResult:
        """
        Send one email

        Args:
            to: Recipient address, comma-separated addresses, or a list
            subject: Email subject
            html_body: HTML content
            text_body: Plain-text alternative

        Returns:
            NotificationResult; transport failures are reported, not raised
        """
        recipients = parse_emails(to)
        if not recipients:
            return NotificationResult.failed('No recipient address')

        try:
            self._send_email_html(recipients, subject, html_body, text_body)
        except (ConfigurationError, EmailError) as e:
            logger.error("Error sending email to %s: %s", ', '.join(recipients), e)
            return NotificationResult.failed(str(e))

        logger.info("Email sent successfully to: %s", ', '.join(recipients))
        return NotificationResult.sent(recipients=recipients)

    def _send_email_html(self, recipients: List[str], subject: str, html_content: str,
                         text_content: Optional[str] = None) -> None:
        """Send HTML email"""
        username, password = self.username, self.password
        from_name, reply_to = self.from_name, self.reply_to
        if self.sender_settings is not None:
            current = self.sender_settings()
            # Stored sender account overrides MAIL_USERNAME/MAIL_PASSWORD as a pair
            if current.email_account and current.email_password:
                username, password = current.email_account, current.email_password
            from_name = current.from_name or from_name
            reply_to = current.reply_to or reply_to

        if not all([username, password]):
            raise ConfigurationError("Email configuration not found")

        try:
            # Create message
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = formataddr((from_name, username))
            msg['To'] = ', '.join(recipients)
            if reply_to:
                msg['Reply-To'] = reply_to

            if text_content:
                msg.attach(MIMEText(text_content, 'plain'))
            msg.attach(MIMEText(html_content or text_content or '', 'html'))

            # Send email
            with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls(context=ssl.create_default_context())
                server.login(username, password)
                server.send_message(msg)

        except (smtplib.SMTPException, OSError) as e:
            raise EmailError(f"Failed to send email: {str(e)}")

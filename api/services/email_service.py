import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
import logging

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ["SMTP_HOST", "SMTP_PORT", "SMTP_USER", "SMTP_PASSWORD", "SENDER_EMAIL"]


class EmailService:
    """
    Sends transactional mail (trial reminders) over SMTP.

    Config keys: SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASSWORD and
    SENDER_EMAIL are required; SENDER_NAME and SMTP_USE_TLS are optional.
    Port 465 uses implicit SSL, anything else STARTTLS unless disabled.
    """

    def __init__(self, config: dict):
        missing = [k for k in REQUIRED_KEYS if not config.get(k)]
        if missing:
            raise ValueError(f"Config must contain: {', '.join(missing)}")

        self.smtp_host = config["SMTP_HOST"]
        self.smtp_port = int(config["SMTP_PORT"])
        self.smtp_user = config["SMTP_USER"]
        self.smtp_password = config["SMTP_PASSWORD"]
        self.sender_email = config["SENDER_EMAIL"]
        self.sender_name = config.get("SENDER_NAME") or "RepuRadar"
        self.use_tls = str(config.get("SMTP_USE_TLS") or "true").lower() == "true"

    @classmethod
    def from_settings(cls, settings_repo) -> Optional["EmailService"]:
        """None when SMTP is not configured"""
        if not settings_repo.is_smtp_configured():
            logger.info("SMTP not configured, email disabled")
            return None
        return cls(settings_repo.get_smtp_config())

    def _build_message(self, to_email: str, subject: str, html_content: str, text_content: Optional[str]):
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{self.sender_name} <{self.sender_email}>"
        message["To"] = to_email
        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))
        return message

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> tuple[bool, str]:
        """Returns (success, "sent" or the error message)."""
        message = self._build_message(to_email, subject, html_content, text_content)
        context = ssl.create_default_context()
        try:
            if self.smtp_port == 465:
                with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, context=context) as server:
                    server.login(self.smtp_user, self.smtp_password)
                    server.send_message(message)
            else:
                with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                    if self.use_tls:
                        server.starttls(context=context)
                    server.login(self.smtp_user, self.smtp_password)
                    server.send_message(message)
        except smtplib.SMTPAuthenticationError as e:
            error_message = f"SMTP authentication failed: {str(e)}"
            logger.error(error_message)
            return False, error_message
        except (smtplib.SMTPException, OSError) as e:
            error_message = f"SMTP error: {str(e)}"
            logger.error(error_message)
            return False, error_message

        logger.info(f"Email sent to {to_email}")
        return True, "sent"

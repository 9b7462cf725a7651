"""SMTP email client used for OTP delivery."""

from email.message import EmailMessage
from email.utils import formataddr, parseaddr
from logging import getLogger
from re import compile as re_compile

from aiosmtplib import SMTP, SMTPAuthenticationError, SMTPException, SMTPResponseException

from app.configs import file_logger, settings
from app.decorators.with_retry import with_retry
from app.errors import AuthenticationError, ConfigurationError, NetworkError, SendingError

logger = file_logger(getLogger(__name__))

# Regex pattern for header injection prevention
_HEADER_INJECTION_PATTERN = re_compile(r"[\r\n]")

OTP_SUBJECT = "Your verification code"

OTP_HTML = """\
<div style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #1a2a6c;">Verify your email</h2>
  <p>Hi {name},</p>
  <p>Use the code below to verify your email address. It expires in {minutes} minutes.</p>
  <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; color: #333333;">{otp}</p>
  <p style="color: #888888; font-size: 12px;">If you did not create an account, you can ignore this email.</p>
</div>
"""


class EmailClient:
    """Asynchronous SMTP client built on aiosmtplib."""

    def __init__(
        self,
        hostname: str = settings.MAIL_SERVER,
        port: int = settings.MAIL_PORT,
        username: str = settings.MAIL_USERNAME,
        password: str | None = None,
        sender: str | None = None,
    ) -> None:
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password if password is not None else settings.MAIL_PASSWORD.get_secret_value()
        self.sender = sender or str(settings.MAIL_FROM) or username

    def _validate_email(self, email: str) -> str:
        """
        Validate and sanitize email address.

        Args:
            email: Email address to validate.

        Returns:
            Sanitized email address.

        Raises:
            ValueError: If email is invalid or contains injection characters.
        """
        if _HEADER_INJECTION_PATTERN.search(email):
            mssg = "Email contains invalid characters (potential header injection)"
            raise ValueError(mssg)

        _, addr = parseaddr(email)
        if not addr or "@" not in addr:
            mssg = f"Invalid email address: {email}"
            raise ValueError(mssg)

        return addr

    def _sanitize_header(self, value: str) -> str:
        return _HEADER_INJECTION_PATTERN.sub("", value)

    def _create_message(self, subject: str, html: str, text: str, to: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((settings.MAIL_FROM_NAME, self._validate_email(self.sender)))
        message["To"] = self._validate_email(to)
        message["Subject"] = self._sanitize_header(subject)
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    @with_retry(max_retries=2, base_delay=1, max_delay=5, exec_retry=NetworkError)
    async def send_email(self, subject: str, html: str, text: str, to: str) -> None:
        """
        Send a multipart email.

        Raises:
            ConfigurationError: SMTP credentials are not configured.
            AuthenticationError: The server rejected the login.
            SendingError: The server refused the message.
            NetworkError: The server could not be reached.
        """
        if not self.username or not self.password or not self.sender:
            mssg = "Email configuration (MAIL_USERNAME, MAIL_PASSWORD) is required"
            raise ConfigurationError(mssg)

        try:
            message = self._create_message(subject, html, text, to)
        except ValueError as e:
            raise SendingError(str(e)) from e

        smtp = SMTP(
            hostname=self.hostname,
            port=self.port,
            use_tls=settings.MAIL_SSL_TLS,
            start_tls=settings.MAIL_STARTTLS if not settings.MAIL_SSL_TLS else False,
            timeout=settings.MAIL_TIMEOUT,
        )
        try:
            async with smtp:
                await smtp.login(self.username, self.password)
                await smtp.send_message(message)
        except SMTPAuthenticationError as e:
            logger.exception("SMTP login rejected")
            raise AuthenticationError from e
        except SMTPResponseException as e:
            logger.exception("SMTP server refused the message")
            mssg = f"SMTP server refused request: {e.code}"
            raise SendingError(mssg) from e
        except (SMTPException, OSError) as e:
            logger.warning(f"SMTP connection to {self.hostname}:{self.port} failed: {e}")
            raise NetworkError from e

        logger.info("Email sent.")

    async def send_otp_email(self, to: str, name: str, otp: str) -> None:
        html = OTP_HTML.format(name=name, otp=otp, minutes=settings.OTP_EXPIRY_MINUTES)
        text = (
            f"Hi {name},\n\nYour verification code is {otp}. "
            f"It expires in {settings.OTP_EXPIRY_MINUTES} minutes."
        )
        await self.send_email(OTP_SUBJECT, html, text, to)

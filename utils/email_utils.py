import logging
import os
import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)


class SmtpMailer:
    """
    Thin adapter over the SMTP relay.

    send() never raises: it returns False when the message could not be handed
    to the relay so callers can report the failure without losing their work.
    """

    def __init__(self, server, port=587, username=None, password=None, sender=None, use_tls=True, timeout=50):
        self.server = server
        self.port = int(port)
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            server=config.get("MAIL_SERVER"),
            port=config.get("MAIL_PORT", 587),
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
            sender=config.get("MAIL_SENDER"),
            use_tls=config.get("MAIL_USE_TLS", True),
        )

    def build_message(self, to_email, subject, body, attachments=None):
        msg = MIMEMultipart()
        msg["From"] = f"RH Manager <{self.sender}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain", "utf-8"))

        # attachments: iterable of (filename, bytes)
        for filename, content in attachments or ():
            part = MIMEApplication(content, Name=os.path.basename(filename))
            part["Content-Disposition"] = f'attachment; filename="{os.path.basename(filename)}"'
            msg.attach(part)
        return msg

    def send(self, to_email, subject, body, attachments=None) -> bool:
        if not to_email:
            logger.warning("Email '%s' skipped: no recipient", subject)
            return False

        if not self.username or not self.password:
            logger.warning("Mail credentials missing (MAIL_USERNAME / MAIL_PASSWORD); '%s' not sent", subject)
            return False

        msg = self.build_message(to_email, subject, body, attachments=attachments)
        try:
            with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as server:
                server.ehlo()
                if self.use_tls:
                    server.starttls()
                    server.ehlo()
                server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Email '%s' to %s failed", subject, to_email)
            return False

        logger.info("Email '%s' sent to %s", subject, to_email)
        return True

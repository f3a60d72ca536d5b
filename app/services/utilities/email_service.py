"""
Email Service
=============

SMTP delivery plus the "new plant added" notifier built on top of it.

``PlantNotifier`` is best-effort: it never raises, so a broken mail setup
can never fail or roll back a garden change. Without an SMTP host it runs in
simulation mode and only logs the message it would have sent.
"""

from __future__ import annotations

import html
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from app.domain.plant import Plant

logger = logging.getLogger(__name__)


@dataclass
class EmailConfig:
    """Configuration for email sending."""

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    from_address: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.smtp_host)

    @property
    def sender(self) -> str:
        return self.from_address or self.smtp_username or "leaflink@localhost"


@dataclass
class EmailMessage:
    to_address: str
    subject: str
    body_text: str
    body_html: str | None = None

    def to_mime(self, from_address: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = self.subject
        msg["From"] = from_address
        msg["To"] = self.to_address

        msg.attach(MIMEText(self.body_text, "plain"))
        if self.body_html:
            msg.attach(MIMEText(self.body_html, "html"))
        return msg


class EmailService:
    """Sends :class:`EmailMessage` objects over SMTP, optionally with STARTTLS."""

    def __init__(self, config: EmailConfig | None = None):
        self._config = config or EmailConfig()

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def send(self, message: EmailMessage) -> bool:
        """Deliver ``message``. Returns False instead of raising on SMTP failures."""
        cfg = self._config
        if not cfg.enabled:
            logger.error("SMTP host not configured")
            return False

        try:
            mime_msg = message.to_mime(cfg.sender)
            with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port) as server:
                if cfg.smtp_use_tls:
                    server.starttls(context=ssl.create_default_context())
                if cfg.smtp_username and cfg.smtp_password:
                    server.login(cfg.smtp_username, cfg.smtp_password)
                server.sendmail(cfg.sender, message.to_address, mime_msg.as_string())
        except smtplib.SMTPAuthenticationError as exc:
            logger.error("SMTP authentication failed: %s", exc)
            return False
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", message.to_address, exc)
            return False

        logger.info("Email sent to %s", message.to_address)
        return True


def plant_added_message(plant: "Plant", recipient: str) -> EmailMessage:
    name = plant.display_name
    text = (
        f"You've added a new {plant.species}. "
        f"We'll remind you to water it every {plant.water_frequency_days} days.\n\n"
        "Happy Growing,\nThe LeafLink Team\n"
    )
    body_html = f"""\
<div style="font-family: Arial, sans-serif; background-color: #fafaf9; padding: 40px;">
  <div style="max-width: 500px; margin: 0 auto; background: #ffffff; border-radius: 16px;">
    <div style="background-color: #e1f6e8; padding: 30px; text-align: center;">
      <h1 style="color: #1f523f; margin: 0;">LeafLink</h1>
    </div>
    <div style="padding: 30px;">
      <h2 style="color: #2a805d; margin-top: 0;">New Plant Added!</h2>
      <p>Hello <strong>{html.escape(recipient.split("@")[0])}</strong>,</p>
      <p>You have successfully added a new companion to your garden.</p>
      <p><strong>{html.escape(name)}</strong> ({html.escape(plant.species)})
         &middot; Every {plant.water_frequency_days} days</p>
      <p style="color: #a8a29e; font-size: 12px;">Happy Growing,<br>The LeafLink Team</p>
    </div>
  </div>
</div>
"""
    return EmailMessage(
        to_address=recipient,
        subject=f"Welcome to the garden, {name}!",
        body_text=text,
        body_html=body_html,
    )


class PlantNotifier:
    """Tells the owner by email that a plant joined their garden."""

    def __init__(self, email_service: Optional[EmailService] = None):
        self._email = email_service or EmailService()

    @property
    def simulated(self) -> bool:
        return not self._email.enabled

    def notify_plant_added(self, plant: "Plant", recipient: Optional[str]) -> bool:
        """Send the welcome email. Never raises; returns whether it went out."""
        if not recipient or "@" not in recipient:
            logger.debug("No email address for %s; skipping plant-added email", recipient)
            return False

        try:
            message = plant_added_message(plant, recipient)
            if self.simulated:
                logger.info(
                    "[Email simulation] SMTP not configured. Would send to=%s subject=%r body=%r",
                    message.to_address,
                    message.subject,
                    message.body_text,
                )
                return True
            return self._email.send(message)
        except Exception:
            logger.exception("Plant-added email for %s failed", recipient)
            return False

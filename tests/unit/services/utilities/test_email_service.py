import smtplib
from unittest.mock import MagicMock, patch

from app.services.utilities.email_service import (
    EmailConfig,
    EmailService,
    PlantNotifier,
    plant_added_message,
)
from conftest import make_plant


def test_plant_added_message_content():
    message = plant_added_message(make_plant(name="Figgy <3"), "ana@example.com")

    assert message.to_address == "ana@example.com"
    assert message.subject == "Welcome to the garden, Figgy <3!"
    assert "every 7 days" in message.body_text
    assert "Figgy &lt;3" in message.body_html
    mime = message.to_mime("garden@example.com")
    assert mime["From"] == "garden@example.com"
    assert mime["To"] == "ana@example.com"


def test_simulated_notifier_logs_instead_of_sending(caplog):
    notifier = PlantNotifier(EmailService(EmailConfig()))

    with patch("smtplib.SMTP") as smtp, caplog.at_level("INFO", logger="app.services.utilities.email_service"):
        assert notifier.notify_plant_added(make_plant(), "ana@example.com") is True

    smtp.assert_not_called()
    assert notifier.simulated
    assert "Email simulation" in caplog.text


def test_notifier_skips_recipients_without_address():
    notifier = PlantNotifier(EmailService(EmailConfig(smtp_host="smtp.example.com")))

    assert notifier.notify_plant_added(make_plant(), "demo-user") is False
    assert notifier.notify_plant_added(make_plant(), None) is False


def test_send_uses_starttls_and_login():
    config = EmailConfig(
        smtp_host="smtp.example.com",
        smtp_port=2525,
        smtp_username="garden",
        smtp_password="secret",
        from_address="garden@example.com",
    )
    server = MagicMock()

    with patch("smtplib.SMTP") as smtp:
        smtp.return_value.__enter__.return_value = server
        sent = PlantNotifier(EmailService(config)).notify_plant_added(make_plant(), "ana@example.com")

    assert sent is True
    smtp.assert_called_once_with("smtp.example.com", 2525)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("garden", "secret")
    sender, recipient, _body = server.sendmail.call_args.args
    assert (sender, recipient) == ("garden@example.com", "ana@example.com")


def test_smtp_failure_never_raises():
    config = EmailConfig(smtp_host="smtp.example.com", smtp_use_tls=False)

    with patch("smtplib.SMTP", side_effect=smtplib.SMTPConnectError(421, "busy")):
        assert PlantNotifier(EmailService(config)).notify_plant_added(make_plant(), "ana@example.com") is False


def test_unexpected_error_is_swallowed():
    email = MagicMock()
    email.enabled = True
    email.send.side_effect = RuntimeError("template bug")

    assert PlantNotifier(email).notify_plant_added(make_plant(), "ana@example.com") is False

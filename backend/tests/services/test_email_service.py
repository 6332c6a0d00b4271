import pytest

from app.core.config import settings
from app.core.exceptions import ServiceException
from app.services.email import EmailService
from app.services.template_service import TemplateService


def test_console_provider_records_outbox(email_service):
    result = email_service.send_email("a@example.com", "Hello", "<p>Hi <b>there</b></p>")

    assert result == {"id": "console-1"}
    sent = email_service.outbox[0]
    assert sent["to"] == "a@example.com"
    assert sent["subject"] == "Hello"
    assert sent["text"] == "Hi there"
    assert sent["from"].startswith("Disciplix <")


def test_verification_email_links_to_client(email_service):
    email_service.send_verification_email("a@example.com", "Ana", "abc123")

    sent = email_service.outbox[-1]
    assert sent["subject"] == "Verify your Disciplix account"
    assert f"{settings.client_url}/verify-email?token=abc123" in sent["html"]
    assert "Ana" in sent["html"]


def test_password_reset_email(email_service):
    email_service.send_password_reset_email("a@example.com", "Ana", "xyz789")

    sent = email_service.outbox[-1]
    assert sent["subject"] == "Reset your Disciplix password"
    assert "/reset-password?token=xyz789" in sent["html"]


def test_template_escapes_names():
    html = TemplateService().render_template(
        "email/verification.html",
        name="<script>",
        action_url="http://localhost:3000/verify-email?token=t",
        expires_in_hours=24,
    )
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_resend_provider_requires_api_key(db, monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", None)
    with pytest.raises(ServiceException):
        EmailService(db, provider="resend")


def test_resend_failures_raise_service_exception(db, monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", "re_test_key")

    def _fail(_payload):
        raise RuntimeError("provider down")

    monkeypatch.setattr("app.services.email.resend.Emails.send", _fail)
    service = EmailService(db, provider="resend")

    with pytest.raises(ServiceException) as exc_info:
        service.send_email("a@example.com", "Hello", "<p>Hi</p>")
    assert "provider down" in exc_info.value.message
    assert service.outbox == []


def test_resend_success_returns_provider_response(db, monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", "re_test_key")
    sent = []

    def _send(payload):
        sent.append(payload)
        return {"id": "re_123"}

    monkeypatch.setattr("app.services.email.resend.Emails.send", _send)

    result = EmailService(db, provider="resend").send_email("a@example.com", "Hello", "<p>Hi</p>")

    assert result == {"id": "re_123"}
    assert sent[0]["to"] == "a@example.com"

import io
import json
from unittest import mock
from urllib.error import HTTPError

from app.services.email_chain import EmailMessage, EmailProvider, EmailProviderChain


def _message() -> EmailMessage:
    return EmailMessage(
        to="family@example.com",
        subject="Birthday: Somchai Jaidee",
        html="<p>hi</p>",
        text="hi",
        title="Birthday: Somchai Jaidee",
    )


def _ok_response():
    response = mock.MagicMock()
    response.status = 200
    response.read.return_value = b'{"message_id": "m-1"}'
    response.__enter__.return_value = response
    return response


def test_smtp_success_skips_template_api(smtp_and_api_settings):
    with mock.patch("app.services.email_chain.smtplib") as smtplib, mock.patch(
        "app.services.http_client.urlopen"
    ) as urlopen:
        result = EmailProviderChain(smtp_and_api_settings).send(_message())

    assert result.success is True
    assert result.provider == "smtp"
    smtp = smtplib.SMTP.return_value
    smtp.login.assert_called_once_with("mailer@eldercare.test", "pw")
    smtp.send_message.assert_called_once()
    urlopen.assert_not_called()


def test_smtp_failure_falls_back_to_template_api(smtp_and_api_settings):
    with mock.patch("app.services.email_chain.smtplib") as smtplib, mock.patch(
        "app.services.http_client.urlopen", return_value=_ok_response()
    ) as urlopen:
        smtplib.SMTP.side_effect = OSError("connection refused")
        result = EmailProviderChain(smtp_and_api_settings).send(_message())

    assert result.success is True
    assert result.provider == "template_api"
    urlopen.assert_called_once()

    request = urlopen.call_args[0][0]
    body = json.loads(request.data.decode("utf-8"))
    assert body["template_uuid"] == "tpl-123"
    assert body["mail_to"] == [{"email": "family@example.com"}]
    assert body["mail_from"]["email"] == "noreply@eldercare.test"
    assert body["payload"]["message"] == "hi"
    assert request.get_header("Authorization").startswith("Basic ")
    assert urlopen.call_args.kwargs["timeout"] == 5


def test_smtp_ssl_used_when_secure(smtp_and_api_settings):
    smtp_and_api_settings.smtp.secure = True
    smtp_and_api_settings.smtp.port = 465
    with mock.patch("app.services.email_chain.smtplib") as smtplib:
        result = EmailProviderChain(smtp_and_api_settings).send(_message())

    assert result.success is True
    smtplib.SMTP_SSL.assert_called_once_with("smtp.eldercare.test", 465, timeout=5)
    smtplib.SMTP.assert_not_called()


def test_every_provider_failing_reports_each_error(smtp_and_api_settings):
    error = HTTPError(
        "https://email-api.test",
        400,
        "Bad Request",
        {},
        io.BytesIO(b'{"error": {"description": "invalid template"}}'),
    )
    with mock.patch("app.services.email_chain.smtplib") as smtplib, mock.patch(
        "app.services.http_client.urlopen", side_effect=error
    ):
        smtplib.SMTP.side_effect = OSError("connection refused")
        result = EmailProviderChain(smtp_and_api_settings).send(_message())

    assert result.success is False
    assert result.not_configured is False
    assert "smtp: connection refused" in result.error
    assert "template_api: HTTP 400: invalid template" in result.error


def test_nothing_configured_makes_no_calls(unconfigured_settings):
    with mock.patch("app.services.email_chain.smtplib") as smtplib, mock.patch(
        "app.services.http_client.urlopen"
    ) as urlopen:
        chain = EmailProviderChain(unconfigured_settings)
        result = chain.send(_message())

    assert chain.is_configured is False
    assert result.success is False
    assert result.not_configured is True
    assert result.error == "Email not configured"
    smtplib.SMTP.assert_not_called()
    smtplib.SMTP_SSL.assert_not_called()
    urlopen.assert_not_called()


def test_template_api_needs_sender_address(api_settings):
    api_settings.from_address = None
    assert EmailProviderChain(api_settings).is_configured is False


def test_custom_provider_order_is_respected(unconfigured_settings):
    calls = []

    def failing(message):
        calls.append("first")
        raise RuntimeError("boom")

    chain = EmailProviderChain(
        unconfigured_settings,
        providers=[
            EmailProvider("first", lambda: True, failing),
            EmailProvider("disabled", lambda: False, lambda m: calls.append("disabled")),
            EmailProvider("second", lambda: True, lambda m: calls.append("second")),
        ],
    )

    result = chain.send(_message())

    assert result.success is True
    assert result.provider == "second"
    assert calls == ["first", "second"]

from app.config import DEFAULT_EMAIL_API_URL, NotificationSettings

ENV_KEYS = [
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "SMTP_SECURE",
    "SMS_API_KEY",
    "SMS_API_SECRET",
    "SMS_SENDER",
    "EMAIL_API_URL",
    "EMAIL_API_KEY",
    "EMAIL_API_SECRET",
    "EMAIL_FROM_ADDRESS",
    "EMAIL_FROM_NAME",
    "EMAIL_TEMPLATE_ID",
    "ALERT_DEDUP_ENABLED",
    "SWEEP_MAX_WORKERS",
]


def _clear(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_when_environment_is_empty(monkeypatch):
    _clear(monkeypatch)
    settings = NotificationSettings.from_env()

    assert settings.email_configured is False
    assert settings.sms_configured is False
    assert settings.dedup_enabled is True
    assert settings.max_workers == 1
    assert settings.email_api.url == DEFAULT_EMAIL_API_URL
    assert settings.smtp.port == 587
    assert settings.smtp.secure is False


def test_port_465_implies_implicit_tls_unless_overridden(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("SMTP_PORT", "465")
    assert NotificationSettings.from_env().smtp.secure is True

    monkeypatch.setenv("SMTP_SECURE", "false")
    assert NotificationSettings.from_env().smtp.secure is False


def test_email_api_falls_back_to_sms_credentials(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("SMS_API_KEY", "k")
    monkeypatch.setenv("SMS_API_SECRET", "s")
    monkeypatch.setenv("EMAIL_TEMPLATE_ID", "tpl")
    monkeypatch.setenv("EMAIL_FROM_ADDRESS", "noreply@eldercare.test")

    settings = NotificationSettings.from_env()

    assert settings.email_api.api_key == "k"
    assert settings.email_api.api_secret == "s"
    assert settings.email_configured is True
    assert settings.sms_configured is True


def test_smtp_needs_host_user_and_password(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("SMTP_HOST", "smtp.test")
    monkeypatch.setenv("SMTP_USER", "user")
    assert NotificationSettings.from_env().email_configured is False

    monkeypatch.setenv("SMTP_PASS", "pw")
    settings = NotificationSettings.from_env()
    assert settings.email_configured is True
    assert settings.sender_address == "user"


def test_boolean_and_integer_parsing(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("ALERT_DEDUP_ENABLED", "off")
    monkeypatch.setenv("SWEEP_MAX_WORKERS", "not-a-number")

    settings = NotificationSettings.from_env()

    assert settings.dedup_enabled is False
    assert settings.max_workers == 1

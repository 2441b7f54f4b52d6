from unittest import mock

from app.models.events import Contact, DueEvent, DueEventType
from app.models.sweep import DeliveryResult
from app.services.aggregator import aggregate
from app.services.alert_log import AlertLogGate
from app.services.dispatcher import ChannelDispatcher
from app.services.email_chain import EmailProviderChain
from app.services.sms import SmsProvider
from app.services.templates import render_event
from conftest import TODAY, FakeStore


def _event(contacts) -> DueEvent:
    return render_event(
        DueEvent(
            type=DueEventType.BIRTHDAY,
            subject_id="p1",
            subject_name="Somchai Jaidee",
            event_date=TODAY,
            value=80,
            contacts=contacts,
        )
    )


def _dispatcher(store, email_result=None, sms_result=None):
    email = mock.Mock(spec=EmailProviderChain)
    email.send.return_value = email_result or DeliveryResult(success=True, provider="smtp")
    sms = mock.Mock(spec=SmsProvider)
    sms.send.return_value = sms_result or DeliveryResult(success=True, provider="sms_api")
    return ChannelDispatcher(email, sms, AlertLogGate(store)), email, sms


def test_email_failure_does_not_block_sms():
    store = FakeStore()
    dispatcher, _, sms = _dispatcher(
        store, email_result=DeliveryResult(success=False, error="smtp: timed out")
    )
    event = _event([Contact(name="Daughter", email="d@example.com", phone="0812345678")])

    outcome = dispatcher.dispatch(event)

    assert outcome.emailSent is False
    assert outcome.emailError == "smtp: timed out"
    assert outcome.smsSent is True
    assert outcome.smsError is None
    sms.send.assert_called_once_with("0812345678", event.message)
    assert aggregate([outcome]).successful == 1
    assert [(log["channel"], log["status"]) for log in store.alert_logs] == [
        ("email", "FAILED"),
        ("sms", "SENT"),
    ]


def test_one_log_entry_per_channel_with_several_contacts():
    store = FakeStore()
    dispatcher, email, _ = _dispatcher(store)
    event = _event(
        [
            Contact(name="Son", email="son@example.com"),
            Contact(name="Guardian", email="guardian@example.com"),
        ]
    )

    outcome = dispatcher.dispatch(event)

    assert outcome.emailSent is True
    assert email.send.call_count == 2
    assert [m.to for m in (c.args[0] for c in email.send.call_args_list)] == [
        "son@example.com",
        "guardian@example.com",
    ]
    assert len(store.alert_logs) == 1
    log = store.alert_logs[0]
    assert log["type"] == "BIRTHDAY"
    assert log["subjectId"] == "p1"
    assert log["eventDate"] == TODAY.isoformat()
    assert log["status"] == "SENT"
    assert log["createdAt"].tzinfo is not None


def test_unconfigured_channel_logged_as_skipped():
    store = FakeStore()
    dispatcher, _, _ = _dispatcher(
        store,
        sms_result=DeliveryResult(success=False, error="SMS not configured", not_configured=True),
    )
    event = _event([Contact(name="Son", phone="0812345678")])

    outcome = dispatcher.dispatch(event)

    assert outcome.smsSent is False
    assert outcome.smsError == "SMS not configured"
    assert store.alert_logs[0]["status"] == "SKIPPED"
    assert aggregate([outcome]).failed == 1


def test_provider_exception_becomes_failed_outcome():
    store = FakeStore()
    dispatcher, email, _ = _dispatcher(store)
    email.send.side_effect = ValueError("bad address")
    event = _event([Contact(name="Son", email="son@example.com")])

    outcome = dispatcher.dispatch(event)

    assert outcome.emailSent is False
    assert "bad address" in outcome.emailError
    assert store.alert_logs[0]["status"] == "FAILED"


def test_log_insert_failure_is_swallowed():
    store = FakeStore()
    store.fail_inserts = True
    dispatcher, _, _ = _dispatcher(store)

    outcome = dispatcher.dispatch(_event([Contact(name="Son", email="son@example.com")]))

    assert outcome.emailSent is True
    assert store.alert_logs == []


def test_event_without_contacts_counts_as_failed():
    store = FakeStore()
    dispatcher, email, sms = _dispatcher(store)

    outcome = dispatcher.dispatch(_event([]))

    email.send.assert_not_called()
    sms.send.assert_not_called()
    assert store.alert_logs == []
    result = aggregate([outcome])
    assert (result.processed, result.successful, result.failed) == (1, 0, 1)

import smtplib

import pytest

from services import notification_service
from services.notification_service import EmailSender, send_sms_alert


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.sent = []
        self.started_tls = False
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        pass

    def send_message(self, msg):
        if FakeSMTP.error:
            raise FakeSMTP.error
        self.sent.append(msg)


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.error = None
    monkeypatch.setattr(notification_service.smtplib, 'SMTP', FakeSMTP)
    return FakeSMTP


@pytest.fixture
def sender():
    return EmailSender(host='smtp.example.com', port=587, user='u', password='p', from_email='alerts@example.com')


def test_unconfigured_sender_refuses():
    ok, error = EmailSender().send_email('a@b.com', 'Hi', 'text')
    assert ok is False
    assert error == "SMTP service is not configured."


def test_from_config_reads_smtp_keys():
    sender = EmailSender.from_config({
        'SMTP_HOST': 'mail', 'SMTP_PORT': '465', 'SMTP_USER': 'u', 'SMTP_PASS': 'p', 'SMTP_FROM_EMAIL': 'f@x.com',
    })
    assert sender.port == 465
    assert sender.is_configured()


def test_severe_alert_is_sent(smtp, sender):
    ok, error = sender.send_severe_symptom_alert('carol@mail.com', 'Alice', "pain <sharp>")

    assert (ok, error) == (True, None)
    server = smtp.instances[0]
    assert server.started_tls
    msg = server.sent[0]
    assert msg['To'] == 'carol@mail.com'
    assert msg['Subject'] == "URGENT Health Alert for Patient: Alice"
    html = msg.get_body(preferencelist=('html',)).get_content()
    assert "pain &lt;sharp&gt;" in html


def test_relay_rejection_is_reported(smtp, sender):
    smtp.error = smtplib.SMTPResponseException(550, b"not permitted")
    ok, error = sender.send_email('x@mail.com', 'Hi', 'text')
    assert ok is False
    assert error.startswith("SMTP Relay Error (Code 550)")


def test_connection_error_is_reported(smtp, sender):
    smtp.error = smtplib.SMTPServerDisconnected("gone")
    ok, error = sender.send_email('x@mail.com', 'Hi', 'text')
    assert ok is False
    assert "SMTP Connection Error" in error


def test_sms_alert_is_logged(caplog):
    with caplog.at_level('WARNING'):
        assert send_sms_alert('+15550100200', "URGENT") is True
    assert "[NOTIFICATION] SMS alert to +15550100200" in caplog.text


def test_welcome_email_escapes_user_fields(smtp, sender):
    ok, _ = sender.send_welcome_email('eve@mail.com', '<b>Eve</b>', 'a<b&c', 'patient', 'http://x/login?a=1&b=2')

    assert ok is True
    msg = smtp.instances[0].sent[0]
    html = msg.get_body(preferencelist=('html',)).get_content()
    assert "<b>Eve</b>" not in html
    assert "&lt;b&gt;Eve&lt;/b&gt;" in html
    assert "a&lt;b&amp;c" in html
    assert 'href="http://x/login?a=1&amp;b=2"' in html
    assert "Hello <b>Eve</b>," in msg.get_body(preferencelist=('plain',)).get_content()


def test_severe_alert_escapes_patient_name(smtp, sender):
    sender.send_severe_symptom_alert('carol@mail.com', '<script>x</script>', "pain")
    html = smtp.instances[0].sent[0].get_body(preferencelist=('html',)).get_content()
    assert "<script>" not in html
    assert "&lt;script&gt;x&lt;/script&gt;" in html

import random

import mongomock
import pytest
from langchain_core.runnables import RunnableLambda

from app import create_app
from database import DocumentStore
from seed_data import seed_database


class FakeEmailer:
    def __init__(self, ok=True, error=None):
        self.ok = ok
        self.error = error
        self.sent = []

    def send_severe_symptom_alert(self, to, patient_name, symptom_description):
        self.sent.append(('alert', to, patient_name, symptom_description))
        return self.ok, self.error

    def send_welcome_email(self, to, display_name, temporary_password, role, login_url):
        self.sent.append(('welcome', to, display_name, temporary_password, role, login_url))
        return self.ok, self.error


class FakeClassifier:
    def __init__(self, assessment=None):
        self.assessment = assessment
        self.calls = []

    def assess(self, patient_id, description, risk_profile, latest_vitals, selected):
        self.calls.append({
            'patient_id': patient_id,
            'description': description,
            'risk_profile': risk_profile,
            'latest_vitals': latest_vitals,
            'selected': selected,
        })
        return self.assessment


class FakeLLM:
    """Stands in for a chat model: `with_structured_output` yields a runnable returning canned output."""

    def __init__(self, outputs=None, error=None):
        self.outputs = outputs or {}
        self.error = error
        self.prompts = []

    def with_structured_output(self, schema):
        def respond(prompt_value):
            self.prompts.append(prompt_value.to_string())
            if self.error:
                raise self.error
            return self.outputs.get(schema.__name__)
        return RunnableLambda(respond)


@pytest.fixture
def store():
    return DocumentStore(mongomock.MongoClient(), 'healthwise_test')


@pytest.fixture
def seeded_store(store):
    seed_database(store, rng=random.Random(7))
    return store


@pytest.fixture
def emailer():
    return FakeEmailer()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def app(seeded_store, emailer, classifier, llm):
    app = create_app(
        config={'TESTING': True, 'SECRET_KEY': 'test-secret', 'APP_URL': 'http://testserver'},
        store=seeded_store,
        llm=llm,
        classifier=classifier,
        emailer=emailer,
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(email, password='password'):
        resp = client.post('/api/auth/login', json={'email': email, 'password': password})
        assert resp.status_code == 200, resp.get_json()
        return resp
    return _login

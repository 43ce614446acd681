from pymongo.errors import PyMongoError

from app import create_app
from database import DocumentStore
from models import SeverityAssessment
from seed_data import DOCTOR_ID_SMITH, PATIENT_ID_ALICE
from services.chat_service import chat_id
from services.care_ai_service import SuggestedInterventions


def test_dashboard_data(client, login):
    login('alice.wonder@mail.com')
    data = client.get('/api/patient/dashboard').get_json()

    assert len(data['healthData']) == 30
    stamps = [d['timestamp'] for d in data['healthData']]
    assert stamps == sorted(stamps)
    assert all(d['patientId'] == str(PATIENT_ID_ALICE) for d in data['healthData'])
    assert 1 <= len(data['medications']) <= 3
    assert [r['severity'] for r in data['symptomReports']] == ['moderate', 'mild']


def test_admin_can_view_patient_dashboard(client, login):
    login('admin@healthwise.com')
    assert client.get('/api/patient/dashboard').status_code == 400
    assert client.get('/api/patient/dashboard?patient_id=607f1f77bcf86cd799439099').status_code == 404
    resp = client.get(f'/api/patient/dashboard?patient_id={PATIENT_ID_ALICE}')
    assert resp.status_code == 200


def test_submit_severe_symptoms(client, login, emailer, seeded_store):
    login('alice.wonder@mail.com')
    resp = client.post('/api/patient/symptoms', json={'severity': 'severe', 'description': "Chest pain and sweating"})

    assert resp.status_code == 201
    body = resp.get_json()
    assert body['critical'] is True
    assert body['report']['severity'] == 'severe'
    assert body['report']['patientId'] == str(PATIENT_ID_ALICE)
    assert {n['channel']: n['status'] for n in body['notifications']} == {
        'sms': 'sent', 'email': 'sent', 'chat': 'sent',
    }
    assert len(body['status']) == 3
    assert emailer.sent[0][1] == 'carol.wonder@mail.com'
    alert = seeded_store.chat_messages.find_one({'chatId': chat_id(DOCTOR_ID_SMITH, PATIENT_ID_ALICE),
                                                 'senderName': 'System Alert'})
    assert "Chest pain and sweating" in alert['text']

    reports = client.get('/api/patient/symptoms').get_json()['symptomReports']
    assert reports[0]['description'] == "Chest pain and sweating"


def test_submit_mild_symptoms_uses_assessment(client, login, classifier, emailer):
    classifier.assessment = SeverityAssessment(
        ai_severity='mild', justification="Nothing alarming.", alert_recommended=False,
    )
    login('alice.wonder@mail.com')
    resp = client.post('/api/patient/symptoms', json={'severity': 'mild', 'description': "Runny nose"})

    body = resp.get_json()
    assert resp.status_code == 201
    assert body['critical'] is False
    assert body['assessment']['ai_severity'] == 'mild'
    assert emailer.sent == []


def test_submit_rejects_invalid_input(client, login):
    login('alice.wonder@mail.com')
    resp = client.post('/api/patient/symptoms', json={'severity': 'extreme', 'description': "pain"})
    assert resp.status_code == 400
    resp = client.post('/api/patient/symptoms', json={'severity': 'mild'})
    assert resp.status_code == 400


def test_only_patients_submit_reports(client, login):
    login('dr.smith@healthwise.com')
    resp = client.post('/api/patient/symptoms', json={'severity': 'mild', 'description': "x"})
    assert resp.status_code == 403


def test_interventions(client, login, llm):
    llm.outputs['SuggestedInterventions'] = SuggestedInterventions(
        suggested_interventions="Walk 20 minutes daily.",
    )
    login('alice.wonder@mail.com')
    resp = client.post('/api/patient/interventions')

    assert resp.status_code == 200
    assert resp.get_json() == {'suggested_interventions': "Walk 20 minutes daily."}
    assert "Medications:" in llm.prompts[0]
    assert "Readmission risk: high" in llm.prompts[0]


def test_interventions_llm_failure(client, login, llm):
    llm.error = RuntimeError("quota exceeded")
    login('alice.wonder@mail.com')
    resp = client.post('/api/patient/interventions')
    assert resp.status_code == 502
    assert "quota exceeded" in resp.get_json()['error']


def test_submit_rejects_non_string_description(client, login, seeded_store):
    login('alice.wonder@mail.com')
    resp = client.post('/api/patient/symptoms', json={'severity': 'mild', 'description': 123})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == "Symptom description is required."
    assert seeded_store.symptom_reports.count_documents({'patientId': PATIENT_ID_ALICE}) == 2


class _UnreadableCollection:
    def find(self, *args, **kwargs):
        raise PyMongoError("read failed")


class ReportReadFailsStore(DocumentStore):
    @property
    def symptom_reports(self):
        return _UnreadableCollection()


def test_report_read_failures_return_json_errors(seeded_store, emailer, classifier, llm):
    store = ReportReadFailsStore(seeded_store.client, 'healthwise_test')
    app = create_app(config={'TESTING': True, 'SECRET_KEY': 'test-secret'},
                     store=store, llm=llm, classifier=classifier, emailer=emailer)
    client = app.test_client()
    client.post('/api/auth/login', json={'email': 'alice.wonder@mail.com', 'password': 'password'})

    resp = client.get('/api/patient/symptoms')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': "Could not load symptom reports."}
    resp = client.post('/api/patient/interventions')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': "Could not load patient data."}
    assert llm.prompts == []

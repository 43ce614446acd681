import pytest

from models import SeverityAssessment
from services.alert_service import (
    MANUAL_SEVERE_FALLBACK, build_alert_text, build_info_text, build_sms_text, decide,
)
from services.chat_service import chat_id


def assessment(ai_severity='mild', alert=False, follow_up=None):
    return SeverityAssessment(
        ai_severity=ai_severity,
        justification="Stable vitals.",
        alert_recommended=alert,
        follow_up_suggestion=follow_up,
    )


ALL_ASSESSMENTS = [None] + [
    assessment(sev, alert) for sev in ('mild', 'moderate', 'severe') for alert in (False, True)
]


@pytest.mark.parametrize('candidate', ALL_ASSESSMENTS)
def test_severe_selection_is_always_critical(candidate):
    assert decide('severe', candidate) is True


@pytest.mark.parametrize('selected', ['mild', 'moderate'])
def test_no_assessment_and_not_severe_is_not_critical(selected):
    assert decide(selected, None) is False


@pytest.mark.parametrize('selected', ['mild', 'moderate', 'severe'])
def test_ai_severe_is_critical(selected):
    assert decide(selected, assessment('severe', False)) is True


@pytest.mark.parametrize('selected', ['mild', 'moderate'])
def test_alert_recommendation_is_critical(selected):
    assert decide(selected, assessment('mild', True)) is True


def test_moderate_assessment_without_alert_is_not_critical():
    assert decide('mild', assessment('moderate', False)) is False


@pytest.mark.parametrize('a,b', [
    ('607f1f77bcf86cd799439012', '607f1f77bcf86cd799439011'),
    ('doctor-1', 'patient-9'),
    ('b', 'a'),
])
def test_chat_id_is_symmetric(a, b):
    assert chat_id(a, b) == chat_id(b, a)
    assert chat_id(a, b) == '_'.join(sorted([a, b]))


def test_alert_text_includes_ai_details():
    text = build_alert_text('Alice', 'Chest tightness', 'moderate', assessment('severe', True))
    assert 'Chest tightness' in text
    assert 'Patient-selected severity: moderate' in text
    assert 'AI-assessed severity: severe' in text
    assert 'Stable vitals.' in text


def test_alert_text_without_assessment_uses_manual_fallback():
    text = build_alert_text('Alice', 'Cannot breathe', 'severe', None)
    assert 'defaulting based on patient manual severe selection' in text
    assert MANUAL_SEVERE_FALLBACK in text
    assert 'AI-assessed' not in text


def test_info_text_carries_follow_up():
    text = build_info_text('Bob', 'Dizzy', 'mild', assessment('moderate', False, 'ask about dizziness duration'))
    assert 'ask about dizziness duration' in text
    assert 'AI-assessed severity: moderate' in text


@pytest.mark.parametrize('selected,candidate,expected', [
    ('severe', assessment('mild', False), 'severe'),
    ('severe', None, 'severe'),
    ('mild', assessment('severe', True), 'severe'),
    ('moderate', assessment('mild', True), 'moderate'),
])
def test_sms_text_reports_the_more_severe_level(selected, candidate, expected):
    text = build_sms_text('Alice', selected, candidate)
    assert text == f"HealthWise Hub URGENT: Alice reported {expected} symptoms. Please check on them immediately."

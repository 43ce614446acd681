from pymongo import DESCENDING

from database import serialize
from services.symptom_service import list_symptom_reports


def recent_health_data(store, patient_id, limit):
    """Newest `limit` entries, returned oldest first for charting."""
    cursor = store.health_data.find({'patientId': patient_id}).sort('timestamp', DESCENDING).limit(limit)
    return [serialize(d) for d in reversed(list(cursor))]


def patient_medications(store, patient_id):
    return [serialize(m) for m in store.medications.find({'patientId': patient_id})]


def dashboard_data(store, patient_id):
    return {
        "healthData": recent_health_data(store, patient_id, 30),
        "medications": patient_medications(store, patient_id),
        "symptomReports": list_symptom_reports(store, patient_id, limit=5),
    }


def health_data_summary(dashboard):
    vitals = dashboard["healthData"][-3:]
    lines = ["Recent vitals (newest last):"]
    for d in vitals:
        lines.append(
            f"- {d['timestamp']}: HR {d.get('heartRate', 'n/a')}, "
            f"Glucose {d.get('bloodGlucose', 'n/a')} mg/dL, Steps {d.get('steps', 'n/a')}"
        )
    if not vitals:
        lines.append("- none recorded")
    lines.append("Medications:")
    for m in dashboard["medications"]:
        adherence = f"{m['adherence']}%" if m.get('adherence') is not None else "unknown"
        lines.append(f"- {m['name']} {m['dosage']} ({m['frequency']}), adherence {adherence}")
    if not dashboard["medications"]:
        lines.append("- none recorded")
    lines.append("Recent symptom reports:")
    for s in dashboard["symptomReports"]:
        lines.append(f"- {s['severity']}: {s['description']}")
    if not dashboard["symptomReports"]:
        lines.append("- none reported")
    return "\n".join(lines)


def medication_adherence_summary(medications):
    if not medications:
        return "No medications recorded."
    return "Medication Adherence:\n" + "\n".join(
        f"- {m['name']} ({m['dosage']}): "
        + (f"{m['adherence']}%" if m.get('adherence') is not None else "unknown")
        for m in medications
    )

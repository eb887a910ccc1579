"""postop_server — FastAPI webhook for post-operative symptom reports.

Exposes the postop_triage SDK as a single authenticated endpoint that
returns a patient-facing triage message and, for urgent cases, alerts the
care team by messaging bot and email.
"""

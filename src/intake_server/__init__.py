"""intake_server — FastAPI REST API for the patient intake workflow.

Exposes IntakeWorkflow (patient-facing session + questionnaire steps) and
AdminService (staff review, stats, IFC pre-fill) over HTTP.
"""

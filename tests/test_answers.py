"""Payload validation tests for intake and the five step schemas."""

from datetime import date, datetime

import pytest

from helpers.payloads import JANE, consent, eq5d, ifc, ifc_prefill, odi, vas
from intake_workflow.errors import ValidationError
from intake_workflow.models.answers import (
    ConsentAnswers,
    Eq5dAnswers,
    IfcAnswers,
    IfcPrefill,
    OdiAnswers,
    PatientCreate,
    VasAnswers,
    odi_disability_percent,
    parse_payload,
)


class TestPatientCreate:
    def test_minimal_payload(self):
        patient = parse_payload(PatientCreate, JANE)
        assert patient.name == "Jane Doe"
        assert patient.date_of_birth == date(1980, 1, 1)
        assert patient.hospital is None

    def test_blank_optional_fields_become_none(self):
        patient = parse_payload(PatientCreate, {**JANE, "email": "  ", "phone": ""})
        assert patient.email is None
        assert patient.phone is None

    def test_name_is_stripped(self):
        patient = parse_payload(PatientCreate, {**JANE, "name": "  Jane Doe "})
        assert patient.name == "Jane Doe"

    @pytest.mark.parametrize("payload", [
        {"date_of_birth": "1980-01-01"},
        {"name": "   ", "date_of_birth": "1980-01-01"},
        {"name": "Jane Doe"},
        {"name": "Jane Doe", "date_of_birth": "not-a-date"},
    ])
    def test_missing_or_malformed_identity_rejected(self, payload):
        with pytest.raises(ValidationError):
            parse_payload(PatientCreate, payload)

    def test_error_message_names_the_field(self):
        with pytest.raises(ValidationError, match="date_of_birth"):
            parse_payload(PatientCreate, {"name": "Jane Doe"})


class TestOdiAnswers:
    def test_total_score_is_sum_of_sections(self):
        answers = parse_payload(OdiAnswers, odi(3))
        assert answers.total_score == 30
        assert answers.to_columns()["total_score"] == 30

    @pytest.mark.parametrize("total,percent", [(0, 0.0), (20, 40.0), (33, 66.0), (50, 100.0)])
    def test_disability_percent(self, total, percent):
        assert odi_disability_percent(total) == percent

    def test_client_total_is_ignored(self):
        answers = parse_payload(OdiAnswers, {**odi(1), "total_score": 49})
        assert answers.to_columns()["total_score"] == 10, (
            "Server must recompute total_score from the sections"
        )

    @pytest.mark.parametrize("score", [-1, 6])
    def test_out_of_range_section_rejected(self, score):
        with pytest.raises(ValidationError, match="lifting"):
            parse_payload(OdiAnswers, {**odi(), "lifting": score})

    def test_missing_section_rejected(self):
        payload = odi()
        del payload["travelling"]
        with pytest.raises(ValidationError, match="travelling"):
            parse_payload(OdiAnswers, payload)


class TestVasAnswers:
    def test_fractional_scores_accepted(self):
        answers = parse_payload(VasAnswers, {**vas(), "neck_pain": 7.5})
        assert answers.neck_pain == 7.5

    @pytest.mark.parametrize("score", [-0.1, 10.5])
    def test_out_of_range_rejected(self, score):
        with pytest.raises(ValidationError):
            parse_payload(VasAnswers, {**vas(), "back_pain": score})


class TestEq5dAnswers:
    def test_valid(self):
        answers = parse_payload(Eq5dAnswers, eq5d(code=2, health_scale=100))
        assert answers.mobility == 2
        assert answers.health_scale == 100

    @pytest.mark.parametrize("field,value", [
        ("mobility", 3),
        ("anxiety_depression", -1),
        ("health_scale", 101),
    ])
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError, match=field):
            parse_payload(Eq5dAnswers, {**eq5d(), field: value})


class TestConsentAnswers:
    def test_signed_at_defaults_to_now(self):
        columns = parse_payload(ConsentAnswers, consent()).to_columns()
        assert isinstance(columns["signed_at"], datetime)
        assert columns["signed_at"].tzinfo is not None

    def test_blank_witness_becomes_none(self):
        answers = parse_payload(ConsentAnswers, consent(witness_signature=" "))
        assert answers.witness_signature is None

    def test_item_keys_and_initials_stripped(self):
        answers = parse_payload(ConsentAnswers, consent(consent_items={" item1 ": " JD "}))
        assert answers.consent_items == {"item1": "JD"}

    @pytest.mark.parametrize("items", [{}, {"item1": ""}, {"  ": "JD"}])
    def test_bad_items_rejected(self, items):
        with pytest.raises(ValidationError, match="consent_items"):
            parse_payload(ConsentAnswers, consent(consent_items=items))

    def test_signature_required(self):
        with pytest.raises(ValidationError, match="patient_signature"):
            parse_payload(ConsentAnswers, consent(patient_signature=""))


class TestIfcAnswers:
    def test_gap_is_trusted_as_submitted(self):
        """No cross-field check: gap need not equal fee - rebate."""
        answers = parse_payload(IfcAnswers, ifc(fee=5000, rebate=3000, gap=1234))
        assert answers.gap == 1234

    def test_negative_money_rejected(self):
        with pytest.raises(ValidationError, match="fee"):
            parse_payload(IfcAnswers, ifc(fee=-1))

    def test_signature_required(self):
        payload = ifc()
        del payload["patient_signature"]
        with pytest.raises(ValidationError, match="patient_signature"):
            parse_payload(IfcAnswers, payload)

    def test_prefill_needs_no_signature(self):
        prefill = parse_payload(IfcPrefill, ifc_prefill())
        assert prefill.fee == 5000
        assert not hasattr(prefill, "patient_signature")


class TestParsePayload:
    def test_instance_returned_unchanged(self):
        answers = OdiAnswers(**odi())
        assert parse_payload(OdiAnswers, answers) is answers

    def test_other_model_is_revalidated(self):
        prefill = IfcPrefill(**ifc_prefill())
        with pytest.raises(ValidationError, match="patient_signature"):
            parse_payload(IfcAnswers, prefill)

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError):
            parse_payload(VasAnswers, "not a dict")

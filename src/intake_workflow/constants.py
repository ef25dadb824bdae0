"""Intake workflow constants shared across the SDK.

Step numbers are fixed: the patient normally walks 1 → 5 in order.
"""

import os

FIRST_STEP = 1
LAST_STEP = 5
ALL_STEPS: frozenset[int] = frozenset(range(FIRST_STEP, LAST_STEP + 1))

# Human-readable step names for API responses and logging.
STEP_NAMES: dict[int, str] = {
    1: "ODI",
    2: "VAS",
    3: "EQ5D",
    4: "Consent",
    5: "IFC",
}

# ODI: ten sections, each scored 0-5, so the total is out of 50.
ODI_SECTIONS: tuple[str, ...] = (
    "pain_intensity",
    "personal_care",
    "lifting",
    "walking",
    "sitting",
    "standing",
    "sleeping",
    "sex_life",
    "social_life",
    "travelling",
)
ODI_MAX_SECTION_SCORE = 5
ODI_MAX_TOTAL = ODI_MAX_SECTION_SCORE * len(ODI_SECTIONS)

VAS_SITES: tuple[str, ...] = (
    "neck_pain",
    "right_arm",
    "left_arm",
    "back_pain",
    "right_leg",
    "left_leg",
)

EQ5D_DIMENSIONS: tuple[str, ...] = (
    "mobility",
    "personal_care",
    "usual_activities",
    "pain_discomfort",
    "anxiety_depression",
)

# The six financial fields staff can pre-fill on the IFC step.
IFC_FINANCIAL_FIELDS: tuple[str, ...] = (
    "quote_number",
    "item_number",
    "description",
    "fee",
    "rebate",
    "gap",
)

# Bytes of CSPRNG output behind each session token (256 bits by default).
# Overridable via SESSION_TOKEN_BYTES; never below 16 (128 bits).
SESSION_TOKEN_BYTES = max(16, int(os.getenv("SESSION_TOKEN_BYTES", "32")))

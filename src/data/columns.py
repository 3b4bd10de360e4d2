"""
Column mappings for the Google Sheets the tracker reads and writes.

The sheets are maintained by hand in Hebrew, so every header label lives
here and nowhere else.
"""

# Roster sheet: internal field name -> header label
ANIMAL_FIELD_TO_HEADER = {
    "name": "שם",
    "chip_id": "שבב",
    "secondary_chip_id": "שבב נוסף",
    "sex": "מין",
    "description": "תיאור",
    "weight": "משקל",
    "arrival_date": "תאריך הגעה",
    "birth_date": "תאריך לידה",
    "location": "מתחם",
    "special_trimming": "טילוף מיוחד",
    "notes": "התנהגותי/ הערות",
    "drugs": "טשטוש",
    "castration_date": "ת.סירוס",
    "deworming_date": "תאריך תילוע",
    "source": "מקור",
    "status": "סטטוס",
    "friends": "חברויות",
    "assigned_caregivers": "בטיפול",
}

# Short names the web client has always sent in profile edits
ANIMAL_FIELD_ALIASES = {
    "id": "chip_id",
    "id2": "secondary_chip_id",
    "castration": "castration_date",
    "deworming": "deworming_date",
    "in_treatment": "assigned_caregivers",
}

# Treatment sheet: fixed column order A..L
TREATMENT_HEADERS = (
    "תאריך",        # date
    "יום",          # weekday
    "בוקר",         # morning
    "צהריים",       # noon
    "ערב",          # evening
    "טיפול",        # medication
    "מינון",        # dosage
    "מתן",          # body part / administration route
    "משך",          # duration
    "מתחם",         # location
    "סיבת טיפול",   # medical case
    "הערות",        # notes
)
DATE_COLUMN = 0
MORNING_COLUMN = 2
NOON_COLUMN = 3
EVENING_COLUMN = 4
# Free-text columns from here on are written verbatim, never parsed
TEXT_COLUMNS_START = 5
TREATMENT_COLUMN_COUNT = len(TREATMENT_HEADERS)

# Protocols sheet: internal field name -> header label
PROTOCOL_FIELD_TO_HEADER = {
    "animal_type_label": "חיה",
    "medical_case": "אבחון",
    "medication": "תרופה",
    "days": "ימים",
    "frequency": "תדירות",
    "morning": "בוקר",
    "noon": "צהריים",
    "evening": "ערב",
    "dosage": "מינון",
    "body_part": "מתן",
}

# Caregivers sheet
CAREGIVER_NAME_HEADER = "מטפל"
CAREGIVER_EMAIL_HEADER = "מייל"

# Configuration sheet
CONFIG_KEY_HEADER = "Key"
CONFIG_VALUE_HEADER = "Value"


def header_index(headers: list[str], label: str) -> int:
    """Return the column index of a header label (trimmed match), or -1."""
    target = label.strip()
    for idx, header in enumerate(headers):
        if header is not None and str(header).strip() == target:
            return idx
    return -1

"""Read-only reference tables shared by the analyzer and the emitter.

All keys are lower-case; callers lower-case their lookups.
"""

from types import MappingProxyType

# short/brand name -> generic name
GENERIC_NAMES = MappingProxyType(
    {
        "pcm": "Paracetamol",
        "amox": "Amoxicillin",
        "cetirizine": "Cetirizine",
        "hydrocortisone": "Hydrocortisone",
    }
)

# allergen -> short/generic drug identifiers that conflict with it
ALLERGY_CONFLICTS = MappingProxyType(
    {
        "penicillin": frozenset({"amox", "amoxicillin"}),
    }
)

# generic name -> max single dose in mg
SINGLE_DOSE_LIMITS_MG = MappingProxyType(
    {
        "paracetamol": 1000.0,
    }
)

TOPICAL_FORMS = frozenset({"oint", "cream"})
INVASIVE_ROUTES = frozenset({"iv", "im"})

FREQUENCY_PHRASES = MappingProxyType(
    {
        "od": "once daily",
        "bd": "twice daily",
        "tds": "three times daily",
        "qid": "four times daily",
        "hs": "at night",
        "stat": "immediately (stat)",
        "prn": "as needed (prn)",
        "sos": "if needed (sos)",
    }
)

FOOD_PHRASES = MappingProxyType(
    {
        "ac": "before food",
        "pc": "after food",
        "with_meals": "with meals",
        "after_food": "after food",
        "before_food": "before food",
    }
)

DURATION_UNIT_NAMES = MappingProxyType({"d": "days", "w": "weeks", "m": "months"})

import json
import re
from typing import Dict, Mapping, Optional, Union

from medscript.commons import reference
from medscript.parsers.base import format_number, integral_or_float
from medscript.parsers.models import Document, Duration, Medication

_EVERY_N_HOURS = re.compile(r"q(\d+)h")


def expand_frequency(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    key = code.lower()
    if key in reference.FREQUENCY_PHRASES:
        return reference.FREQUENCY_PHRASES[key]
    m = _EVERY_N_HOURS.fullmatch(key)
    if m:
        return f"every {m.group(1)} hours"
    return code


def expand_food(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    return reference.FOOD_PHRASES.get(code.lower(), code)


def format_duration(duration: Optional[Duration]) -> Optional[str]:
    if duration is None:
        return None
    unit = reference.DURATION_UNIT_NAMES.get(duration.unit, "months")
    return f"{format_number(duration.value)} {unit}"


def _weight(value: Optional[float]) -> Union[int, float, None]:
    return None if value is None else integral_or_float(value)


class JsonEmitter:
    """Renders a Document as stable, human-readable JSON text.

    Key order is fixed: patient, allergies, medications, notes.
    """

    def __init__(
        self,
        generic_names: Mapping[str, str] = reference.GENERIC_NAMES,
        include_extras: bool = False,
    ):
        self.generic_names = generic_names
        self.include_extras = include_extras

    def _medication(self, med: Medication) -> Dict:
        out = {
            "form": med.form,
            "shortName": med.name,
            "name": self.generic_names.get((med.name or "").lower(), med.name),
            "dose": med.dose.strength if med.dose else None,
            "amount": med.dose.amount if med.dose else None,
            "route": med.route,
            "frequency": expand_frequency(med.frequency),
            "duration": format_duration(med.duration),
            "food": expand_food(med.food),
        }
        if self.include_extras:
            out["extras"] = dict(med.extras)
        return out

    def to_payload(self, doc: Document) -> Dict:
        return {
            "patient": {
                "name": doc.patient.name,
                "age": doc.patient.age,
                "weightKg": _weight(doc.patient.weight_kg),
            },
            "allergies": list(doc.allergies),
            "medications": [self._medication(m) for m in doc.medications],
            "notes": list(doc.notes),
        }

    def to_json(self, doc: Document) -> str:
        return json.dumps(self.to_payload(doc), ensure_ascii=False, indent=2) + "\n"


def to_json(doc: Document) -> str:
    return JsonEmitter().to_json(doc)

# ===============================
# File: medscript/parsers/models.py
# ===============================
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from medscript.parsers.base import round_half_away

# Fixed conversion factors, not calendar-aware
DAYS_PER_UNIT = {"d": 1, "w": 7, "m": 30}


@dataclass
class Patient:
    name: Optional[str] = None
    age: Optional[int] = None
    weight_kg: Optional[float] = None


@dataclass
class Dose:
    strength: str = ""  # "500mg", "5mg/5ml", "1%"
    amount: Optional[str] = None  # "10ml"


@dataclass
class Duration:
    value: float = 0.0
    unit: str = ""  # d / w / m

    def to_days_rounded(self) -> int:
        return round_half_away(self.value * DAYS_PER_UNIT.get(self.unit, 1))


@dataclass
class Medication:
    form: str
    name: str
    dose: Dose
    frequency: str
    duration: Duration
    route: Optional[str] = None
    food: Optional[str] = None
    extras: Dict[str, str] = field(default_factory=dict)  # flag -> "true"


@dataclass
class Document:
    patient: Patient = field(default_factory=Patient)
    allergies: List[str] = field(default_factory=list)
    medications: List[Medication] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def add_allergy(self, name: str) -> bool:
        """Insert ``name`` lower-cased; returns False if already present."""
        key = name.lower()
        if key in self.allergies:
            return False
        self.allergies.append(key)
        return True

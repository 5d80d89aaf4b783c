# medscript/validation/validators.py
import math
from typing import List, Mapping

from medscript.commons import reference
from medscript.commons.logger import logger
from medscript.parsers.base import (
    Diagnostic,
    extract_first_number,
    format_number,
    leading_number_text,
)
from medscript.parsers.models import Document, Medication

# Semantic checks do not track token positions
_POS = (1, 1)


class SemanticAnalyzer:
    """Domain checks over a parsed Document.

    Pure: never mutates the document and never raises. Every check runs for
    every medication; one failure does not short-circuit the others.
    """

    def __init__(
        self,
        generic_names: Mapping[str, str] = reference.GENERIC_NAMES,
        allergy_conflicts: Mapping[str, frozenset] = reference.ALLERGY_CONFLICTS,
        dose_limits_mg: Mapping[str, float] = reference.SINGLE_DOSE_LIMITS_MG,
    ):
        self.generic_names = generic_names
        self.allergy_conflicts = allergy_conflicts
        self.dose_limits_mg = dose_limits_mg

    def _generic(self, name: str) -> str:
        return self.generic_names.get(name.lower(), name)

    def analyze(self, doc: Document) -> List[Diagnostic]:
        diags: List[Diagnostic] = []

        if not doc.patient.name or not doc.patient.name.strip():
            diags.append(Diagnostic.warning(*_POS, "Patient name is missing (add: patient <Name> ...)"))

        seen = set()
        for med in doc.medications:
            key = med.name.lower()
            if key in seen:
                diags.append(Diagnostic.warning(*_POS, f"Duplicate medication detected: {med.name}"))
            seen.add(key)

            self._check_dose(med, diags)
            self._check_duration(med, diags)
            self._check_route(med, diags)
            self._check_dose_limit(med, diags)
            self._check_allergies(med, doc.allergies, diags)

        logger.debug(f"Semantic analysis produced {len(diags)} diagnostic(s)")
        return diags

    def _check_dose(self, med: Medication, diags: List[Diagnostic]) -> None:
        strength = med.dose.strength if med.dose else ""
        if extract_first_number(strength) <= 0:
            diags.append(Diagnostic.error(*_POS, f"Dose must be positive for {med.name}"))

    def _check_duration(self, med: Medication, diags: List[Diagnostic]) -> None:
        if med.duration is None or med.duration.value <= 0:
            diags.append(Diagnostic.error(*_POS, f"Duration must be > 0 for {med.name}"))

    def _check_route(self, med: Medication, diags: List[Diagnostic]) -> None:
        if not med.route:
            return
        if med.form.lower() in reference.TOPICAL_FORMS and med.route in reference.INVASIVE_ROUTES:
            diags.append(
                Diagnostic.error(*_POS, f"Invalid route '{med.route}' for {med.form} {med.name}")
            )

    def _check_dose_limit(self, med: Medication, diags: List[Diagnostic]) -> None:
        strength = med.dose.strength if med.dose else ""
        if "mg" not in strength:
            return
        for candidate in (med.name.lower(), self._generic(med.name).lower()):
            limit = self.dose_limits_mg.get(candidate)
            if limit is None:
                continue
            mg = extract_first_number(strength)
            if mg > limit:
                drug = self._generic(med.name)
                shown = format_number(mg) if math.isfinite(mg) else leading_number_text(strength)
                diags.append(
                    Diagnostic.warning(
                        *_POS,
                        f"High single dose for {drug} ({shown}mg). Check safety limits.",
                    )
                )
            return

    def _check_allergies(self, med: Medication, allergies: List[str], diags: List[Diagnostic]) -> None:
        names = {med.name.lower(), self._generic(med.name).lower()}
        for allergy in allergies:
            conflicts = self.allergy_conflicts.get(allergy.lower())
            if conflicts and names & conflicts:
                diags.append(
                    Diagnostic.error(
                        *_POS,
                        f"Allergy conflict: patient allergy '{allergy}' conflicts with {med.name}",
                    )
                )


def analyze(doc: Document) -> List[Diagnostic]:
    return SemanticAnalyzer().analyze(doc)

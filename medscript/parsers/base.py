import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Union


class TokenKind(Enum):
    """Closed set of token tags produced by the lexer."""

    SECTION_PATIENT = "section-patient"
    SECTION_ALLERGY = "section-allergy"
    SECTION_RX = "section-rx"
    SECTION_NOTES = "section-notes"
    FORM = "form"
    ID = "id"
    NUMBER = "number"
    UNIT = "unit"
    ROUTE = "route"
    FREQUENCY = "frequency"
    DURATION_UNIT = "duration-unit"
    FOOD_MOD = "food-modifier"
    COLON = "colon"
    UNKNOWN = "unknown"
    EOF = "end-of-input"


SECTION_KINDS = frozenset(
    {
        TokenKind.SECTION_PATIENT,
        TokenKind.SECTION_ALLERGY,
        TokenKind.SECTION_RX,
        TokenKind.SECTION_NOTES,
    }
)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int  # 1-based
    column: int  # 1-based

    def is_section(self) -> bool:
        return self.kind in SECTION_KINDS

    def __str__(self) -> str:
        return f"{self.kind.name} '{self.text}' @ {self.line}:{self.column}"


class Severity(Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    line: int
    column: int
    message: str

    @classmethod
    def error(cls, line: int, column: int, message: str) -> "Diagnostic":
        return cls(Severity.ERROR, line, column, message)

    @classmethod
    def warning(cls, line: int, column: int, message: str) -> "Diagnostic":
        return cls(Severity.WARNING, line, column, message)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def __str__(self) -> str:
        # Front ends print this verbatim
        return f"{self.severity.value} @ {self.line}:{self.column} - {self.message}"


# --------- Numeric helpers shared by parser, analyzer and emitter ----------
_DECIMAL = re.compile(r"\d+(?:\.\d+)?")
_FRACTION = re.compile(r"(\d+)/(\d+)")


def _divide(num: str, den: str) -> float:
    if int(den) == 0:
        raise ValueError(f"zero denominator in '{num}/{den}'")
    try:
        return int(num) / int(den)
    except OverflowError as ex:
        raise ValueError(f"'{num}/{den}' is out of range") from ex


def parse_number(text: str) -> float:
    """Parse a NUMBER literal ('5', '0.5' or '1/2').

    Raises ValueError for empty/malformed text, a zero denominator or a value
    too large to represent as a finite float.
    """
    text = (text or "").strip()
    m = _FRACTION.fullmatch(text)
    if m:
        return _divide(m.group(1), m.group(2))
    if not _DECIMAL.fullmatch(text):
        raise ValueError(f"not a number: '{text}'")
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"'{text}' is out of range")
    return value


def leading_number_text(text: str) -> str:
    """Literal text of the first decimal number in ``text``, else of the first n/m fraction."""
    text = text or ""
    m = _DECIMAL.search(text) or _FRACTION.search(text)
    return m.group(0) if m else ""


def extract_first_number(text: str) -> float:
    """First decimal number found in ``text``, else the first n/m fraction, else 0.

    Oversized decimals come back as ``inf``; callers render them with
    ``leading_number_text``.
    """
    text = text or ""
    m = _DECIMAL.search(text)
    if m:
        return float(m.group(0))
    f = _FRACTION.search(text)
    if f:
        try:
            return _divide(f.group(1), f.group(2))
        except ValueError:
            return 0.0
    return 0.0


def round_half_away(value: float) -> int:
    """Round to the nearest int, halves away from zero (2.5 -> 3, -2.5 -> -3).

    Raises ValueError for inf/nan.
    """
    if not math.isfinite(value):
        raise ValueError(f"cannot round {value!r}")
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def integral_or_float(value: float) -> Union[int, float]:
    """58.0 -> 58; non-integral and non-finite values come back unchanged."""
    if math.isfinite(value) and abs(value - round(value)) < 1e-9:
        return int(round(value))
    return value


def format_number(value: float) -> str:
    """'58' for integral values, plain decimal text ('58.5') otherwise."""
    value = integral_or_float(value)
    if isinstance(value, int):
        return str(value)
    return repr(float(value))

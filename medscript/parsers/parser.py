"""
Recursive-descent parser for MedScript.

Grammar (one token of lookahead, no backtracking):

    Program      := ( PatientBlock | AllergyBlock | RxBlock | NotesBlock )*
    PatientBlock := 'patient' ID ( 'age' NUMBER | 'weight' NUMBER ID? )*
    AllergyBlock := 'allergy' ID+
    RxBlock      := 'rx:' Medication+
    Medication   := FORM ID Dose ROUTE? FREQUENCY Duration FOOD_MOD? ID*
    Dose         := NUMBER ( UNIT ('/' NUMBER UNIT)? | '%' ) (NUMBER UNIT)?
    Duration     := NUMBER DURATION_UNIT
    NotesBlock   := 'notes:' any-token*

Malformed input never aborts the parse: every failure records a Diagnostic,
skips exactly one token and carries on.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List

from medscript.commons.logger import logger
from medscript.parsers.base import Diagnostic, Token, TokenKind, parse_number, round_half_away
from medscript.parsers.lexer import EOF_TEXT
from medscript.parsers.models import Document, Dose, Duration, Medication, Patient

PATIENT_ATTRIBUTES = ("age", "weight")


@dataclass
class ParseResult:
    document: Document
    diagnostics: List[Diagnostic] = field(default_factory=list)


class Parser:
    def __init__(self, tokens: Iterable[Token]):
        self._tokens: Iterator[Token] = iter(tokens)
        self._last = Token(TokenKind.EOF, EOF_TEXT, 1, 1)
        self.diagnostics: List[Diagnostic] = []
        self.document = Document()
        self.current = self._pull()

    # -------- token plumbing --------
    def _pull(self) -> Token:
        # A stream that runs dry behaves as if it ended with EOF
        tok = next(self._tokens, None)
        if tok is None:
            return Token(TokenKind.EOF, EOF_TEXT, self._last.line, self._last.column)
        self._last = tok
        return tok

    def _advance(self) -> None:
        if self.current.kind is not TokenKind.EOF:
            self.current = self._pull()

    def _at(self, kind: TokenKind) -> bool:
        return self.current.kind is kind

    def _at_block_end(self) -> bool:
        return self._at(TokenKind.EOF) or self.current.is_section()

    def _error(self, tok: Token, message: str) -> None:
        self.diagnostics.append(Diagnostic.error(tok.line, tok.column, message))

    def _warning(self, tok: Token, message: str) -> None:
        self.diagnostics.append(Diagnostic.warning(tok.line, tok.column, message))

    def expect(self, kind: TokenKind, message: str) -> Token:
        """Consume a token of ``kind`` or record an error, skip one token and
        hand back an empty synthetic token of the requested kind."""
        tok = self.current
        if tok.kind is kind:
            self._advance()
            return tok
        self._error(tok, f"{message} (found: {tok.kind.name} '{tok.text}')")
        self._advance()
        return Token(kind, "", tok.line, tok.column)

    # -------- productions --------
    def parse(self) -> ParseResult:
        while not self._at(TokenKind.EOF):
            kind = self.current.kind
            if kind is TokenKind.SECTION_PATIENT:
                self._parse_patient()
            elif kind is TokenKind.SECTION_ALLERGY:
                self._parse_allergy()
            elif kind is TokenKind.SECTION_RX:
                self._parse_rx()
            elif kind is TokenKind.SECTION_NOTES:
                self._parse_notes()
            else:
                self._error(
                    self.current,
                    "Unexpected token at top-level. Expected 'patient', 'allergy', 'rx:' or 'notes:'",
                )
                self._advance()

        if not self.document.medications:
            self.diagnostics.append(
                Diagnostic.error(
                    1, 1, "No medications found. Add an 'rx:' section with at least one medication."
                )
            )
        logger.debug(
            f"Parsed {len(self.document.medications)} medication(s), "
            f"{len(self.diagnostics)} syntax diagnostic(s)"
        )
        return ParseResult(self.document, self.diagnostics)

    def _parse_patient(self) -> None:
        self.expect(TokenKind.SECTION_PATIENT, "Expected 'patient'")
        # Later sections replace the patient wholesale
        patient = Patient()
        self.document.patient = patient

        name_tok = self.expect(TokenKind.ID, "Expected patient name after 'patient'")
        if name_tok.text:
            patient.name = name_tok.text

        while self._at(TokenKind.ID):
            key = self.current.text.lower()
            if key == "age":
                self._advance()
                age_tok = self.expect(TokenKind.NUMBER, "Expected age number")
                try:
                    patient.age = round_half_away(parse_number(age_tok.text))
                except ValueError:
                    self._error(age_tok, "Invalid age value")
            elif key == "weight":
                self._advance()
                w_tok = self.expect(TokenKind.NUMBER, "Expected weight number")
                # optional unit, e.g. 'kg'
                if self._at(TokenKind.ID) and self.current.text.lower() not in PATIENT_ATTRIBUTES:
                    self._advance()
                try:
                    patient.weight_kg = parse_number(w_tok.text)
                except ValueError:
                    self._error(w_tok, "Invalid weight value")
            else:
                self._warning(self.current, f"Unknown patient attribute '{self.current.text}' ignored")
                self._advance()

    def _parse_allergy(self) -> None:
        self.expect(TokenKind.SECTION_ALLERGY, "Expected 'allergy'")
        count = 0
        while self._at(TokenKind.ID):
            self.document.add_allergy(self.current.text)
            count += 1
            self._advance()
        if count == 0:
            self._error(self.current, "Expected at least one allergy name after 'allergy'")

    def _parse_rx(self) -> None:
        self.expect(TokenKind.SECTION_RX, "Expected 'rx:'")
        while not self._at_block_end():
            if self._at(TokenKind.FORM):
                self.document.medications.append(self._parse_medication())
            else:
                self._error(self.current, "Expected medication starting with a FORM (Tab/Cap/Syr/...)")
                self._advance()

    def _parse_medication(self) -> Medication:
        form_tok = self.expect(TokenKind.FORM, "Expected FORM")
        name_tok = self.expect(TokenKind.ID, "Expected medicine name (e.g., PCM, Amox)")
        dose = self._parse_dose()

        route = None
        if self._at(TokenKind.ROUTE):
            route = self.current.text.lower()
            self._advance()

        freq_tok = self.expect(TokenKind.FREQUENCY, "Expected frequency (od/bd/tds/qid/...)")
        duration = self._parse_duration()

        food = None
        if self._at(TokenKind.FOOD_MOD):
            food = self.current.text.lower()
            self._advance()

        med = Medication(
            form=form_tok.text,
            name=name_tok.text,
            dose=dose,
            route=route,
            frequency=freq_tok.text.lower(),
            duration=duration,
            food=food,
        )
        # trailing identifiers are boolean flags until the next FORM/section
        while self._at(TokenKind.ID):
            med.extras[self.current.text.lower()] = "true"
            self._advance()
        return med

    def _is_unknown(self, text: str) -> bool:
        return self._at(TokenKind.UNKNOWN) and self.current.text == text

    def _parse_dose(self) -> Dose:
        num_tok = self.expect(TokenKind.NUMBER, "Expected dose number (e.g., 500 or 0.5 or 1/2)")
        strength = num_tok.text

        if self._at(TokenKind.UNIT):
            strength += self.current.text
            self._advance()
            # ratio strength, e.g. 5mg/5ml
            if self._is_unknown("/"):
                strength += "/"
                self._advance()
                strength += self.expect(
                    TokenKind.NUMBER,
                    "Expected number after '/' in strength (e.g., 5 in 5mg/5ml)",
                ).text
                strength += self.expect(
                    TokenKind.UNIT,
                    "Expected unit after second number in strength (e.g., ml)",
                ).text
        elif self._is_unknown("%"):
            strength += "%"
            self._advance()
        else:
            self._error(self.current, "Expected unit after dose number (mg/ml/g/...)")

        dose = Dose(strength=strength)

        # optional amount, typically for syrups: NUMBER UNIT
        if self._at(TokenKind.NUMBER):
            amount_tok = self.current
            self._advance()
            if self._at(TokenKind.UNIT):
                dose.amount = amount_tok.text + self.current.text
                self._advance()
            else:
                self._warning(amount_tok, "Possible amount provided but missing unit (e.g., '10ml')")
        return dose

    def _parse_duration(self) -> Duration:
        value_tok = self.expect(TokenKind.NUMBER, "Expected duration number (e.g., 5 in 5d)")
        unit_tok = self.expect(TokenKind.DURATION_UNIT, "Expected duration unit (d/w/m)")
        duration = Duration(unit=unit_tok.text)
        try:
            duration.value = parse_number(value_tok.text)
        except ValueError:
            self._error(value_tok, "Invalid duration value")
            duration.value = 0.0
        return duration

    def _parse_notes(self) -> None:
        notes_tok = self.expect(TokenKind.SECTION_NOTES, "Expected 'notes:'")
        parts = []
        while not self._at_block_end():
            parts.append(self.current.text)
            self._advance()
        note = " ".join(parts).strip()
        if note:
            self.document.notes.append(note)
        else:
            logger.debug(f"Empty notes section at {notes_tok.line}:{notes_tok.column}")
            self.diagnostics.append(Diagnostic.warning(1, 1, "Empty notes section"))


def parse(tokens: Iterable[Token]) -> ParseResult:
    """Parse a token stream into a Document plus syntax diagnostics."""
    return Parser(tokens).parse()

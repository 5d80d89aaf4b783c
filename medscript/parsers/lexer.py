"""
Lexer for MedScript shorthand.

Converts raw prescription text into a lazy stream of tokens with 1-based
line/column tracking. Recognizers are tried in a fixed priority order and the
first one that matches wins; domain keywords therefore shadow identifiers
(a free-standing ``d``, ``w`` or ``m`` is always a DURATION_UNIT).
"""

import re
from typing import Iterator, List, Optional, Tuple

from medscript.parsers.base import Token, TokenKind

_WHITESPACE = re.compile(r"[ \t\f\r\n]+")
_COMMENT = re.compile(r"#[^\r\n]*(?:\r\n|\r|\n|$)")

# (pattern, kind) evaluated top-to-bottom at every position.
# Keyword patterns are case-sensitive whole words.
RULES: List[Tuple[re.Pattern, TokenKind]] = [
    (re.compile(r"patient\b"), TokenKind.SECTION_PATIENT),
    (re.compile(r"allergy\b"), TokenKind.SECTION_ALLERGY),
    (re.compile(r"rx:"), TokenKind.SECTION_RX),
    (re.compile(r"notes:"), TokenKind.SECTION_NOTES),
    (re.compile(r":"), TokenKind.COLON),
    (re.compile(r"(?:Tab|Cap|Syr|Inj|Oint|Drops|Cream|Neb)\b"), TokenKind.FORM),
    (re.compile(r"(?:po|iv|im|sc|sl|pr|topical|inhale)\b"), TokenKind.ROUTE),
    (re.compile(r"(?:od|bd|tds|qid|hs|stat|prn|sos|q[0-9]+h)\b"), TokenKind.FREQUENCY),
    (re.compile(r"(?:ac|pc|with_meals|after_food|before_food)\b"), TokenKind.FOOD_MOD),
    (re.compile(r"(?:mg|g|ml|mcg|IU|%|drops)\b"), TokenKind.UNIT),
    (re.compile(r"[dwm]\b"), TokenKind.DURATION_UNIT),
    (re.compile(r"[0-9]+/[0-9]+|[0-9]+(?:\.[0-9]+)?"), TokenKind.NUMBER),
    (re.compile(r"[A-Za-z][A-Za-z0-9_-]*\b"), TokenKind.ID),
]

EOF_TEXT = "<EOF>"


class Lexer:
    """Pull-style tokenizer; ``next_token()`` keeps returning EOF once exhausted."""

    def __init__(self, text: str):
        self.text = text or ""
        self.pos = 0
        self.line = 1
        self.column = 1

    def _advance(self, lexeme: str) -> None:
        for ch in lexeme:
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(lexeme)

    def _skip(self, pattern: re.Pattern) -> bool:
        m = pattern.match(self.text, self.pos)
        if m and m.group(0):
            self._advance(m.group(0))
            return True
        return False

    def _match_rule(self) -> Optional[Token]:
        for pattern, kind in RULES:
            m = pattern.match(self.text, self.pos)
            if m and m.group(0):
                tok = Token(kind, m.group(0), self.line, self.column)
                self._advance(tok.text)
                return tok
        return None

    def next_token(self) -> Token:
        while self.pos < len(self.text):
            if self._skip(_WHITESPACE) or self._skip(_COMMENT):
                continue
            tok = self._match_rule()
            if tok is not None:
                return tok
            # Fallback: a single unrecognised character
            tok = Token(TokenKind.UNKNOWN, self.text[self.pos], self.line, self.column)
            self._advance(tok.text)
            return tok
        return Token(TokenKind.EOF, EOF_TEXT, self.line, self.column)

    def __iter__(self) -> Iterator[Token]:
        """Yield the remaining tokens, ending with (and including) EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind is TokenKind.EOF:
                return


def tokenize(text: str) -> Iterator[Token]:
    """Fresh token stream over ``text``; call again to restart from scratch."""
    return iter(Lexer(text))

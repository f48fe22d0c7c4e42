"""
Lexer / Tokenizer for LIFO Script.

Classifies source text into a lazy stream of tokens for the interpreter.
Handles instruction keywords, integer / boolean / string literals, label
names (jump targets), label declarations and /* block comments */.

The lexer never fails: a lexeme that matches no grammar rule comes out as
an INVALID token and the interpreter decides which error to raise, since
that depends on what came before it (a bad token right after JUMP is an
InvalidLabel, anywhere else an InvalidToken).
"""

from __future__ import annotations
import enum
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

__all__ = ['TokenType', 'Token', 'Lexer', 'KEYWORDS', 'INSTRUCTIONS', 'LITERALS']


# ──────────────────────────────────────────────
# Token types
# ──────────────────────────────────────────────

class TokenType(enum.Enum):
    # Instructions
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    PUSH = "PUSH"
    PUSH_INT = "PUSH_INT"
    PUSH_BOOL = "PUSH_BOOL"
    PUSH_STR = "PUSH_STR"
    DUP = "DUP"
    EQ = "EQ"
    NEQ = "NEQ"
    POP = "POP"
    SWAP = "SWAP"
    CONCAT = "CONCAT"
    JUMP = "JUMP"
    JUMPI = "JUMPI"
    EMPTY_VECTOR = "EMPTY_VECTOR"
    INSERT = "INSERT"
    SIZE = "SIZE"
    INDEX = "INDEX"
    LOG = "LOG"

    # Literals
    INT = "INT"
    BOOL = "BOOL"
    STRING = "STRING"

    # Labels
    LABEL_NAME = "LABEL_NAME"     # jump target:  name
    LABEL_DECL = "LABEL_DECL"     # declaration:  name:

    # Special
    INVALID = "INVALID"


# ──────────────────────────────────────────────
# Token data class
# ──────────────────────────────────────────────

@dataclass
class Token:
    type: TokenType
    text: str            # lexeme as written
    value: Any           # literal value / label name, else None
    line: int
    col: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.text!r}, L{self.line}:{self.col})"


# ──────────────────────────────────────────────
# Keyword map
# ──────────────────────────────────────────────

KEYWORDS: Dict[str, TokenType] = {
    "ADD": TokenType.ADD,
    "SUB": TokenType.SUB,
    "MUL": TokenType.MUL,
    "PUSH": TokenType.PUSH,
    "PUSH_INT": TokenType.PUSH_INT,
    "PUSH_BOOL": TokenType.PUSH_BOOL,
    "PUSH_STR": TokenType.PUSH_STR,
    "DUP": TokenType.DUP,
    "EQ": TokenType.EQ,
    "NEQ": TokenType.NEQ,
    "POP": TokenType.POP,
    "SWAP": TokenType.SWAP,
    "CONCAT": TokenType.CONCAT,
    "JUMP": TokenType.JUMP,
    "JUMPI": TokenType.JUMPI,
    "EMPTY_VECTOR": TokenType.EMPTY_VECTOR,
    "INSERT": TokenType.INSERT,
    "SIZE": TokenType.SIZE,
    "INDEX": TokenType.INDEX,
    "LOG": TokenType.LOG,
}

INSTRUCTIONS = frozenset(KEYWORDS.values())
LITERALS = frozenset({TokenType.INT, TokenType.BOOL, TokenType.STRING})


# ──────────────────────────────────────────────
# Lexeme patterns
# ──────────────────────────────────────────────

WORD_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_:-")
WHITESPACE = " \t\r\n\f"

INT_RE = re.compile(r'[0-9]+')
BOOL_RE = re.compile(r'true|false')
LABEL_NAME_RE = re.compile(r'[a-z_]+')
LABEL_DECL_RE = re.compile(r'([a-z_]+):')
STRING_RE = re.compile(r'"(?:[^"\\]|\\["\\/bnfrt]|\\u[0-9a-fA-F]{4})*"')


def classify_word(word: str):
    """Return (TokenType, value) for a bare word."""
    if word in KEYWORDS:
        return KEYWORDS[word], None
    if INT_RE.fullmatch(word):
        return TokenType.INT, int(word)
    if BOOL_RE.fullmatch(word):
        return TokenType.BOOL, word == "true"
    if LABEL_NAME_RE.fullmatch(word):
        return TokenType.LABEL_NAME, word
    m = LABEL_DECL_RE.fullmatch(word)
    if m:
        return TokenType.LABEL_DECL, m.group(1)
    return TokenType.INVALID, None


# ──────────────────────────────────────────────
# Lexer
# ──────────────────────────────────────────────

class Lexer:
    """Tokenizes LIFO Script source.

    ``tokens()`` is a generator: tokens are produced on demand, and a fresh
    call starts again from the beginning of the source.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1

    def _peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.source[i] if i < len(self.source) else "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _advance_to(self, end: int):
        while self.pos < end:
            self._advance()

    def _skip_whitespace(self):
        while self.pos < len(self.source) and self.source[self.pos] in WHITESPACE:
            self._advance()

    def _read_block_comment(self) -> Optional[Token]:
        """Skip a comment; an unterminated one comes back as an INVALID token."""
        start_line, start_col = self.line, self.col
        end = self.source.find("*/", self.pos + 2)
        if end < 0:
            text = self.source[self.pos:]
            self._advance_to(len(self.source))
            return Token(TokenType.INVALID, text, None, start_line, start_col)
        self._advance_to(end + 2)
        return None

    def _read_string_literal(self) -> Token:
        """Escapes are validated, not decoded: the value is the body as written."""
        start_line, start_col = self.line, self.col
        m = STRING_RE.match(self.source, self.pos)
        if m:
            self._advance_to(m.end())
            return Token(TokenType.STRING, m.group(0), m.group(0)[1:-1],
                         start_line, start_col)
        start = self.pos
        self._read_until_space()
        return Token(TokenType.INVALID, self.source[start:self.pos], None, start_line, start_col)

    def _read_until_space(self):
        while self.pos < len(self.source) and self.source[self.pos] not in WHITESPACE:
            self._advance()

    def _read_word(self) -> Token:
        start_line, start_col = self.line, self.col
        start = self.pos
        while self.pos < len(self.source) and self.source[self.pos] in WORD_CHARS:
            self._advance()
        if self.pos == start:
            # Not a word character: swallow the whole run as one bad lexeme
            self._read_until_space()
            return Token(TokenType.INVALID, self.source[start:self.pos], None,
                         start_line, start_col)
        text = self.source[start:self.pos]
        token_type, value = classify_word(text)
        return Token(token_type, text, value, start_line, start_col)

    def tokens(self) -> Iterator[Token]:
        """Yield tokens one at a time, from the start of the source."""
        self.pos, self.line, self.col = 0, 1, 1

        while self.pos < len(self.source):
            self._skip_whitespace()
            if self.pos >= len(self.source):
                break

            ch = self._peek()

            # Block comment
            if ch == "/" and self._peek(1) == "*":
                bad = self._read_block_comment()
                if bad is not None:
                    yield bad
                continue

            # String literal
            if ch == '"':
                yield self._read_string_literal()
                continue

            yield self._read_word()

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source and return a list of tokens."""
        return list(self.tokens())

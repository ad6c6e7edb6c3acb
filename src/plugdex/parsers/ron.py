"""
Reader for Rusty Object Notation (RON) documents.

Plugin descriptors are written in RON. This module turns a RON document
into plain Python values so that the typed models in
``plugdex.plugins.manifest`` can validate them:

    ==========================  ==============================
    RON                         Python
    ==========================  ==============================
    ``(a: 1, b: "x")``          ``{"a": 1, "b": "x"}``
    ``Config(a: 1)``            ``{"a": 1}`` (name dropped)
    ``(1, 2)`` / ``[1, 2]``     ``[1, 2]``
    ``{"k": v}``                ``{"k": v}``
    ``Some(x)`` / ``None``      ``x`` / ``None``
    ``High``                    ``"High"``
    ``Name("x")``               ``{"Name": "x"}``
    ``Pair(1, 2)``              ``{"Pair": [1, 2]}``
    ``'c'``                     ``"c"``
    ==========================  ==============================

Example:
    >>> loads('(name: "files", query: (priority: High))')
    {'name': 'files', 'query': {'priority': 'High'}}
"""

import re
from typing import Any

from plugdex.exceptions import DescriptorError

IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
NUMBER_RE = re.compile(
    r"[+-]?(?:0x[0-9A-Fa-f_]+|0o[0-7_]+|0b[01_]+"
    r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?)"
)

SIMPLE_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
}

SPECIAL_FLOATS = {"inf": float("inf"), "NaN": float("nan")}


class RonDecodeError(DescriptorError):
    """Raised when a document is not valid RON."""

    def __init__(self, message: str, text: str, pos: int):
        self.pos = pos
        self.lineno = text.count("\n", 0, pos) + 1
        self.colno = pos - text.rfind("\n", 0, pos)
        super().__init__(f"{message} (line {self.lineno}, column {self.colno})")


class _Reader:
    """Recursive descent reader over a single RON document."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str, pos: int | None = None) -> RonDecodeError:
        return RonDecodeError(message, self.text, self.pos if pos is None else pos)

    def peek(self) -> str:
        return self.text[self.pos : self.pos + 1]

    def expect(self, char: str) -> None:
        self.skip_whitespace()
        if self.peek() != char:
            found = repr(self.peek()) if self.peek() else "end of input"
            raise self.error(f"Expected {char!r}, found {found}")
        self.pos += 1

    def skip_whitespace(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                self.skip_block_comment()
            else:
                break

    def skip_block_comment(self) -> None:
        # Block comments nest in RON
        start = self.pos
        depth = 0
        while self.pos < len(self.text):
            if self.text.startswith("/*", self.pos):
                depth += 1
                self.pos += 2
            elif self.text.startswith("*/", self.pos):
                depth -= 1
                self.pos += 2
                if depth == 0:
                    return
            else:
                self.pos += 1
        raise self.error("Unterminated block comment", start)

    def skip_attributes(self) -> None:
        """Skip leading ``#![enable(...)]`` extension attributes."""
        while True:
            self.skip_whitespace()
            if not self.text.startswith("#!", self.pos):
                return
            end = self.text.find("]", self.pos)
            if end == -1:
                raise self.error("Unterminated attribute")
            self.pos = end + 1

    def document(self) -> Any:
        self.skip_attributes()
        value = self.value()
        self.skip_whitespace()
        if self.pos != len(self.text):
            raise self.error("Trailing characters after value")
        return value

    def value(self) -> Any:
        self.skip_whitespace()
        char = self.peek()
        if not char:
            raise self.error("Unexpected end of input")
        if char == "(":
            return self.parenthesized(None)
        if char == "[":
            return self.sequence()
        if char == "{":
            return self.mapping()
        if char == '"':
            return self.string()
        if char == "'":
            return self.char()
        if char == "r" and self.text[self.pos + 1 : self.pos + 2] in ('"', "#"):
            return self.raw_string()
        if char.isdigit() or char in "+-.":
            return self.number()
        if IDENT_RE.match(char):
            return self.identified()
        raise self.error(f"Unexpected character {char!r}")

    def identified(self) -> Any:
        start = self.pos
        name = self.identifier()
        if name == "true":
            return True
        if name == "false":
            return False
        if name == "None":
            return None
        if name in SPECIAL_FLOATS:
            return SPECIAL_FLOATS[name]
        self.skip_whitespace()
        if name == "Some":
            if self.peek() != "(":
                raise self.error("Expected '(' after Some", start)
            self.pos += 1
            inner = self.value()
            self.skip_whitespace()
            if self.peek() == ",":
                self.pos += 1
            self.expect(")")
            return inner
        if self.peek() == "(":
            return self.parenthesized(name)
        # Unit struct or unit enum variant
        return name

    def identifier(self) -> str:
        match = IDENT_RE.match(self.text, self.pos)
        if not match:
            raise self.error("Expected identifier")
        self.pos = match.end()
        return match.group()

    def at_field(self) -> bool:
        """Check whether the reader sits on a ``name:`` struct field."""
        match = IDENT_RE.match(self.text, self.pos)
        if not match:
            return False
        text = self.text
        index = match.end()
        while index < len(text) and text[index].isspace():
            index += 1
        return text.startswith(":", index) and not text.startswith("::", index)

    def parenthesized(self, name: str | None) -> Any:
        self.expect("(")
        self.skip_whitespace()
        if self.peek() == ")":
            self.pos += 1
            return {} if name else None
        if self.at_field():
            return self.struct_fields()

        items = self.items(")")
        if name is None:
            return items
        return {name: items[0] if len(items) == 1 else items}

    def struct_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        while True:
            self.skip_whitespace()
            if self.peek() == ")":
                self.pos += 1
                return fields
            start = self.pos
            key = self.identifier()
            if key in fields:
                raise self.error(f"Duplicate field {key!r}", start)
            self.expect(":")
            fields[key] = self.value()
            if not self.separator():
                self.expect(")")
                return fields

    def items(self, closing: str) -> list[Any]:
        values: list[Any] = []
        while True:
            self.skip_whitespace()
            if self.peek() == closing:
                self.pos += 1
                return values
            values.append(self.value())
            if not self.separator():
                self.expect(closing)
                return values

    def separator(self) -> bool:
        """Consume a comma; return False when the collection must end here."""
        self.skip_whitespace()
        if self.peek() == ",":
            self.pos += 1
            return True
        return False

    def sequence(self) -> list[Any]:
        self.expect("[")
        return self.items("]")

    def mapping(self) -> dict[Any, Any]:
        self.expect("{")
        result: dict[Any, Any] = {}
        while True:
            self.skip_whitespace()
            if self.peek() == "}":
                self.pos += 1
                return result
            start = self.pos
            key = self.value()
            if isinstance(key, list):
                key = tuple(key)
            try:
                hash(key)
            except TypeError:
                raise self.error("Map key is not hashable", start) from None
            self.expect(":")
            result[key] = self.value()
            if not self.separator():
                self.expect("}")
                return result

    def string(self) -> str:
        start = self.pos
        self.pos += 1
        chunks: list[str] = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self.error("Unterminated string", start)
            char = text[self.pos]
            if char == '"':
                self.pos += 1
                return "".join(chunks)
            if char == "\\":
                chunks.append(self.escape())
            else:
                chunks.append(char)
                self.pos += 1

    def escape(self) -> str:
        start = self.pos
        self.pos += 1
        code = self.peek()
        if code in SIMPLE_ESCAPES:
            self.pos += 1
            return SIMPLE_ESCAPES[code]
        if code == "\n":
            # Line continuation swallows the newline and leading indentation
            self.pos += 1
            while self.peek() in (" ", "\t"):
                self.pos += 1
            return ""
        if code == "x":
            digits = self.text[self.pos + 1 : self.pos + 3]
            if not re.fullmatch(r"[0-9A-Fa-f]{2}", digits):
                raise self.error("Invalid \\x escape", start)
            self.pos += 3
            return chr(int(digits, 16))
        if code == "u":
            if self.text.startswith("{", self.pos + 1):
                end = self.text.find("}", self.pos)
                digits = self.text[self.pos + 2 : end] if end != -1 else ""
                next_pos = end + 1
            else:
                digits = self.text[self.pos + 1 : self.pos + 5]
                next_pos = self.pos + 5
            if not re.fullmatch(r"[0-9A-Fa-f]{1,6}", digits):
                raise self.error("Invalid \\u escape", start)
            self.pos = next_pos
            try:
                return chr(int(digits, 16))
            except ValueError:
                raise self.error("Invalid unicode code point", start) from None
        raise self.error(f"Unknown escape sequence \\{code}", start)

    def raw_string(self) -> str:
        start = self.pos
        self.pos += 1
        hashes = 0
        while self.peek() == "#":
            hashes += 1
            self.pos += 1
        if self.peek() != '"':
            raise self.error("Expected '\"' to open raw string", start)
        self.pos += 1
        terminator = '"' + "#" * hashes
        end = self.text.find(terminator, self.pos)
        if end == -1:
            raise self.error("Unterminated raw string", start)
        value = self.text[self.pos : end]
        self.pos = end + len(terminator)
        return value

    def char(self) -> str:
        start = self.pos
        self.pos += 1
        if self.peek() == "\\":
            value = self.escape()
        elif self.peek() and self.peek() != "'":
            value = self.peek()
            self.pos += 1
        else:
            raise self.error("Empty character literal", start)
        if self.peek() != "'":
            raise self.error("Unterminated character literal", start)
        self.pos += 1
        return value

    def number(self) -> int | float:
        start = self.pos
        sign = self.peek()
        if sign in "+-" and self.text.startswith("inf", self.pos + 1):
            self.pos += 4
            return float(f"{sign}inf")
        match = NUMBER_RE.match(self.text, self.pos)
        if not match or not any(c.isdigit() for c in match.group()):
            raise self.error("Invalid number", start)
        self.pos = match.end()
        literal = match.group().replace("_", "")
        unsigned = literal.lstrip("+-")
        try:
            if unsigned[:2] in ("0x", "0o", "0b"):
                return int(literal, 0)
            if any(c in unsigned for c in ".eE"):
                return float(literal)
            return int(literal, 10)
        except ValueError:
            # Digit-less radix literals and integers past the int size limit
            raise self.error("Invalid number", start) from None


def loads(text: str) -> Any:
    """
    Parse a RON document into Python values.

    Args:
        text: RON source text

    Returns:
        The decoded value (see the module docstring for the mapping)

    Raises:
        RonDecodeError: If the text is not valid RON
    """
    reader = _Reader(text)
    try:
        return reader.document()
    except RecursionError:
        raise reader.error("Nesting too deep") from None

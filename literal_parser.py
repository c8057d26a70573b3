"""Parse a JavaScript array/object literal as plain data.

Only arrays, objects, strings, numbers, ``true``, ``false`` and ``null`` are
accepted. Anything else (identifiers, calls, operators) is a syntax error, so
no upstream text is ever executed.
"""
from __future__ import annotations

from typing import Any


class LiteralSyntaxError(ValueError):
    def __init__(self, message: str, pos: int) -> None:
        super().__init__(f"{message} at position {pos}")
        self.pos = pos


_KEYWORDS = {"true": True, "false": False, "null": None}
_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    "/": "/",
    "\\": "\\",
    "'": "'",
    '"': '"',
}
_NUMBER_CHARS = set("0123456789+-.eE")


def parse_literal(text: str) -> Any:
    parser = _Parser(text)
    value = parser.parse_value()
    parser.skip_ws()
    if parser.pos != len(text):
        raise LiteralSyntaxError("unexpected trailing content", parser.pos)
    return value


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_ws(self) -> None:
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif self.text.startswith("//", self.pos):
                end = self.text.find("\n", self.pos)
                self.pos = len(self.text) if end == -1 else end + 1
            elif self.text.startswith("/*", self.pos):
                end = self.text.find("*/", self.pos + 2)
                if end == -1:
                    raise LiteralSyntaxError("unterminated comment", self.pos)
                self.pos = end + 2
            else:
                break

    def expect(self, ch: str) -> None:
        self.skip_ws()
        if self.peek() != ch:
            raise LiteralSyntaxError(f"expected {ch!r}", self.pos)
        self.pos += 1

    def parse_value(self) -> Any:
        self.skip_ws()
        ch = self.peek()
        if ch == "[":
            return self.parse_array()
        if ch == "{":
            return self.parse_object()
        if ch in ("'", '"'):
            return self.parse_string()
        if ch and (ch.isdigit() or ch in "+-."):
            return self.parse_number()
        if ch.isalpha():
            word = self.parse_identifier()
            if word in _KEYWORDS:
                return _KEYWORDS[word]
            raise LiteralSyntaxError(f"unexpected identifier {word!r}", self.pos - len(word))
        raise LiteralSyntaxError("unexpected character" if ch else "unexpected end of input", self.pos)

    def parse_array(self) -> list[Any]:
        self.expect("[")
        items: list[Any] = []
        while True:
            self.skip_ws()
            if self.peek() == "]":
                self.pos += 1
                return items
            items.append(self.parse_value())
            self.skip_ws()
            if self.peek() == ",":
                self.pos += 1
                continue
            self.expect("]")
            return items

    def parse_object(self) -> dict[str, Any]:
        self.expect("{")
        obj: dict[str, Any] = {}
        while True:
            self.skip_ws()
            ch = self.peek()
            if ch == "}":
                self.pos += 1
                return obj
            if ch in ("'", '"'):
                key = self.parse_string()
            elif ch.isdigit():
                key = str(self.parse_number())
            elif ch.isalpha() or ch in "_$":
                key = self.parse_identifier()
            else:
                raise LiteralSyntaxError("expected object key", self.pos)
            self.expect(":")
            obj[key] = self.parse_value()
            self.skip_ws()
            if self.peek() == ",":
                self.pos += 1
                continue
            self.expect("}")
            return obj

    def parse_identifier(self) -> str:
        start = self.pos
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch.isalnum() or ch in "_$":
                self.pos += 1
            else:
                break
        return self.text[start:self.pos]

    def parse_string(self) -> str:
        quote = self.text[self.pos]
        start = self.pos
        self.pos += 1
        out: list[str] = []
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(out)
            if ch == "\n":
                break
            if ch == "\\":
                self.pos += 1
                esc = self.peek()
                if esc == "u":
                    digits = self.text[self.pos + 1:self.pos + 5]
                    try:
                        out.append(chr(int(digits, 16)))
                    except ValueError:
                        raise LiteralSyntaxError("bad unicode escape", self.pos) from None
                    self.pos += 5
                    continue
                if esc == "\n":
                    self.pos += 1
                    continue
                out.append(_ESCAPES.get(esc, esc))
                self.pos += 1
                continue
            out.append(ch)
            self.pos += 1
        raise LiteralSyntaxError("unterminated string", start)

    def parse_number(self) -> int | float:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in _NUMBER_CHARS:
            self.pos += 1
        raw = self.text[start:self.pos]
        try:
            if any(c in raw for c in ".eE"):
                return float(raw)
            return int(raw)
        except ValueError:
            raise LiteralSyntaxError(f"bad number {raw!r}", start) from None

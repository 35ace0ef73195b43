"""Addition-only calculator embedded in the activities step.

Teachers use it to sum partial counts (e.g. literature handed out by several
members) before committing one number into an activity field. The state is
two strings shown to the user: the expression line (``"3 + 2 = 5"``) and the
live result. Only non-negative integer addition is supported and nothing in
here raises on malformed input: unparseable fragments count as zero.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

ZERO = "0"
ADD_TOKEN = " + "
EQUALS_TOKEN = " = "
_OPERATOR_TOKENS = (ADD_TOKEN, EQUALS_TOKEN)

DIGIT_KEYS = frozenset("0123456789")
ADD_KEYS = frozenset({"+", "Enter"})
EQUALS_KEYS = frozenset({"="})
BACKSPACE_KEYS = frozenset({"Backspace"})
CLEAR_KEYS = frozenset({"Delete", "c", "C"})
CLOSE_KEYS = frozenset({"Escape"})


@dataclass(frozen=True)
class ParsedExpression:
    """Tokenized expression: addends before ``=`` and the total after it."""

    addends: tuple[str, ...]
    total: Optional[str] = None

    @property
    def finalized(self) -> bool:
        return self.total is not None

    @property
    def pending_addition(self) -> bool:
        return not self.finalized and len(self.addends) > 1

    @property
    def awaiting_addend(self) -> bool:
        """True right after ``+``, before the next addend has a digit."""
        return self.pending_addition and self.addends[-1] == ""

    def sum(self) -> int:
        return sum(to_int(a) for a in self.addends)


def to_int(fragment: str | None) -> int:
    fragment = (fragment or "").strip()
    if not fragment.isdecimal():
        return 0
    try:
        return int(fragment)
    except ValueError:
        return 0


def tokenize(expression: str) -> ParsedExpression:
    head, sep, tail = expression.partition("=")
    addends = tuple(part.strip() for part in head.split("+"))
    return ParsedExpression(addends=addends, total=tail.strip() if sep else None)


class ArithmeticHelper:
    """Calculator state machine bound to one activity field at a time."""

    def __init__(self) -> None:
        self.is_open = False
        self.target: Optional[str] = None
        self.expression = ""
        self.result = ZERO

    def open(self, target: str, current_value: int = 0) -> None:
        """Open for `target`, seeding the live result from its stored value."""
        self.is_open = True
        self.target = target
        self.expression = ""
        self.result = str(current_value) if current_value else ZERO

    def close(self) -> None:
        """Close without applying; the pending expression is discarded."""
        self.is_open = False
        self.target = None
        self.expression = ""
        self.result = ZERO

    def digit(self, value: str) -> None:
        if value not in DIGIT_KEYS:
            logger.debug("Ignoring non-digit calculator input %r", value)
            return
        parsed = tokenize(self.expression)
        if parsed.pending_addition:
            current = parsed.addends[-1]
            addend = value if current in ("", ZERO) else current + value
            self.expression = ADD_TOKEN.join(parsed.addends[:-1] + (addend,))
            self.result = addend
        elif parsed.finalized or self.result in (ZERO, ""):
            self.expression = value
            self.result = value
        else:
            # Backspace can leave the result shorter than the addend shown.
            current = parsed.addends[-1] if self.expression else self.result
            addend = value if current == ZERO else current + value
            self.expression = addend
            self.result = addend

    def add(self) -> None:
        parsed = tokenize(self.expression)
        if parsed.finalized:
            total = str(to_int(parsed.total))
            self.result = total
            self.expression = total + ADD_TOKEN
        elif parsed.pending_addition:
            total = str(parsed.sum())
            self.result = total
            self.expression = total + ADD_TOKEN
        else:
            self.expression = str(to_int(self.result)) + ADD_TOKEN

    def equals(self) -> None:
        parsed = tokenize(self.expression)
        if not parsed.pending_addition:
            return
        total = str(parsed.sum())
        self.expression = self.expression.rstrip(" +") + EQUALS_TOKEN + total
        self.result = total

    def clear(self) -> None:
        self.expression = ""
        self.result = ZERO

    def backspace(self) -> None:
        self.result = self.result[:-1] or ZERO
        if tokenize(self.expression).finalized:
            return
        if self.expression.endswith(_OPERATOR_TOKENS):
            self.expression = self.expression[: -len(ADD_TOKEN)]
        else:
            self.expression = self.expression[:-1]

    def resolve(self) -> int:
        """The integer the helper would commit right now."""
        parsed = tokenize(self.expression)
        if parsed.pending_addition:
            return parsed.sum()
        if parsed.finalized:
            return to_int(parsed.total)
        return to_int(self.result)

    def confirm(self) -> tuple[Optional[str], int]:
        """Resolve the expression, close, and return ``(target, value)``."""
        target, value = self.target, self.resolve()
        self.close()
        return target, value

    def action(self, name: str, value: Optional[str] = None) -> None:
        """Dispatch an on-screen control by name."""
        if name == "number":
            self.digit(value or "")
        elif name == "add":
            self.add()
        elif name == "equals":
            self.equals()
        elif name == "clear":
            self.clear()
        elif name == "backspace":
            self.backspace()
        else:
            logger.debug("Unknown calculator action %r", name)

    def press_key(self, key: str) -> bool:
        """Physical keyboard input; returns False for keys it does not handle.

        Escape closes without applying, same as the close button.
        """
        if key in DIGIT_KEYS:
            self.digit(key)
        elif key in ADD_KEYS:
            self.add()
        elif key in EQUALS_KEYS:
            self.equals()
        elif key in BACKSPACE_KEYS:
            self.backspace()
        elif key in CLEAR_KEYS:
            self.clear()
        elif key in CLOSE_KEYS:
            self.close()
        else:
            return False
        return True

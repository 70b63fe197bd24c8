"""
Chapter numbering policies.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Number:
    """
    How a chapter is numbered.

    kind is one of:
        unnumbered  no number, title shown as-is        (`- file.md`)
        default     next number in document order       (`+ file.md`)
        hidden      numbered internally, title hidden   (`! file.md`)
        specified   explicit number in `value`          (`3. file.md`)
    """

    kind: str
    value: Optional[int] = None

    @classmethod
    def specified(cls, value):
        return cls("specified", value)

    def is_numbered(self):
        return self.kind in ("default", "specified")

    def __str__(self):
        if self.kind == "specified":
            return f"Specified({self.value})"
        return self.kind.capitalize()


UNNUMBERED = Number("unnumbered")
DEFAULT = Number("default")
HIDDEN = Number("hidden")


def chapter_numbers(numbers):
    """
    Resolve the displayed number of each chapter, in order.

    Default chapters continue from the last number seen; a Specified(n)
    chapter resets the counter to n. Unnumbered chapters get None. Hidden
    chapters advance the counter but still get None.
    """
    current = 0
    result = []
    for number in numbers:
        if number.kind == "specified":
            current = number.value
            result.append(current)
        elif number.kind == "default":
            current += 1
            result.append(current)
        elif number.kind == "hidden":
            current += 1
            result.append(None)
        else:
            result.append(None)
    return result

"""
Value Objects for visa fee applications.

Value objects are immutable and self-validating. They keep the formats of
identifiers and passport numbers in one place:
- Application IDs (app-xxx)
- Passport numbers (letter + digits)
- Receipt numbers (session-local counter values)
"""

import re
from dataclasses import dataclass
from datetime import date


# Letter (A-P, R-W, Y) + non-zero digit, then either "d[ ]dddd(d)" or "ddddd(d)".
# The second alternative is intentionally unanchored at the start.
# \Z rather than $ so a trailing newline does not match.
PASSPORT_NUMBER_PATTERN = re.compile(
    r"^[A-PR-WYa-pr-wy][1-9]\d\s?\d{4,5}\Z|[A-PR-WYa-pr-wy][1-9]\d{5,6}\Z"
)

# Earliest date the form lets a user pick
EARLIEST_APPLICATION_DATE = date(1900, 1, 1)


def is_valid_passport_number(value: str) -> bool:
    """Check a passport number against PASSPORT_NUMBER_PATTERN."""
    return PASSPORT_NUMBER_PATTERN.search(value) is not None


def is_selectable_application_date(day: date, today: date) -> bool:
    """
    Check whether the form's date picker should offer a day.

    The picker disables future dates and anything before 1900-01-01.
    This is a UI rule only; the schema accepts any calendar date.
    """
    return EARLIEST_APPLICATION_DATE <= day <= today


@dataclass(frozen=True)
class ApplicationId:
    """
    Application ID value object.

    Format: app-{suffix}
    Example: app-01, app-3f9c2a7b1d04

    Used for:
    - Store lookups (get, update, delete)
    - Receipt URLs (/applications/{id}/receipt)
    """

    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("ApplicationId cannot be empty")
        if not self.value.startswith("app-"):
            raise ValueError(
                f"Invalid ApplicationId format: {self.value}. "
                f"Must start with 'app-' prefix."
            )
        if len(self.value) < 5:  # app- + at least 1 char
            raise ValueError(f"ApplicationId too short: {self.value}")

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"ApplicationId('{self.value}')"


@dataclass(frozen=True)
class ReceiptNumber:
    """
    Receipt number value object.

    Numbers come from an in-memory counter and restart at 1 with the
    process. They are NOT unique across sessions.
    """

    value: int

    def __post_init__(self):
        if self.value < 1:
            raise ValueError(f"ReceiptNumber must be >= 1, got {self.value}")

    def __str__(self) -> str:
        return f"{self.value:05d}"

    def __repr__(self) -> str:
        return f"ReceiptNumber({self.value})"

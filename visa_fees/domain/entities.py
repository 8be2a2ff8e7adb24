"""
Domain Entities - the Application record and domain exceptions.

Application is the only entity. It has:
- Identity (assigned by the store on insert, immutable afterwards)
- Mutable state (edited in place)
- Invariants checked on construction
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional

from .value_objects import ApplicationId, is_valid_passport_number


@dataclass
class Application:
    """
    Visa fee application.

    Invariants (enforced on construction):
    1. full_name has at least 3 characters
    2. passport_number matches the passport pattern
    3. address has at least 5 characters
    4. amount_paid is greater than 0

    The id is None until the store assigns one.
    """

    full_name: str
    passport_number: str
    address: str
    application_date: date
    amount_paid: float
    id: Optional[str] = None

    def __post_init__(self):
        """Validate business rules"""
        if len(self.full_name) < 3:
            raise InvalidApplicationError("Full name must be at least 3 characters.")
        if not is_valid_passport_number(self.passport_number):
            raise InvalidApplicationError("Please enter a valid passport number.")
        if len(self.address) < 5:
            raise InvalidApplicationError("Address must be at least 5 characters.")
        if not self.amount_paid > 0:
            raise InvalidApplicationError("Amount must be greater than 0.")
        if self.id is not None:
            # Raises ValueError on a malformed id
            ApplicationId(self.id)

    def with_id(self, application_id: str) -> "Application":
        """Return a copy carrying the given id"""
        return replace(self, id=application_id)

    def to_dict(self) -> Dict[str, object]:
        """Wire representation (camelCase keys, ISO date)"""
        return {
            "id": self.id,
            "fullName": self.full_name,
            "passportNumber": self.passport_number,
            "address": self.address,
            "applicationDate": self.application_date.isoformat(),
            "amountPaid": self.amount_paid,
        }

    def __repr__(self) -> str:
        return (
            f"Application(id={self.id}, name={self.full_name!r}, "
            f"date={self.application_date.isoformat()})"
        )


# Domain exceptions

class DomainError(Exception):
    """Base exception for domain layer errors"""
    pass


class InvalidApplicationError(DomainError, ValueError):
    """Raised when an Application violates its invariants"""
    pass


@dataclass
class FieldErrors:
    """Field name (camelCase) -> messages, plus a root bucket."""

    errors: Dict[str, List[str]] = field(default_factory=dict)

    def add(self, field_name: str, message: str) -> None:
        self.errors.setdefault(field_name, []).append(message)

    def __bool__(self) -> bool:
        return bool(self.errors)


class StructuralValidationError(DomainError):
    """Raised when input fails schema constraints"""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        super().__init__(f"Structural validation failed for: {', '.join(sorted(errors))}")


class SemanticValidationError(DomainError):
    """Raised when the AI checker judges the data implausible"""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        super().__init__(f"Semantic validation failed for: {', '.join(sorted(errors))}")


class ServiceUnavailableError(DomainError):
    """Raised when the AI checker itself fails (network, API, bad output)"""

    MESSAGE = "AI validation service is unavailable. Please try again later."

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        self.errors = {"root": [self.MESSAGE]}
        super().__init__(self.MESSAGE)


class ApplicationNotFoundError(DomainError):
    """Raised when an application doesn't exist"""

    MESSAGE = "Application not found."

    def __init__(self, application_id: str):
        self.application_id = application_id
        self.errors = {"root": [self.MESSAGE]}
        super().__init__(f"Application {application_id} not found")

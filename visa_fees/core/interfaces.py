"""
Core interfaces for the visa fee service.

The application service depends on these abstractions only, so tests can
hand it a fresh store and a fake semantic checker.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from visa_fees.domain.entities import Application


@dataclass
class SemanticCheckRequest:
    """Fields sent to the semantic checker"""
    full_name: str
    passport_number: str
    application_date: str  # ISO yyyy-MM-dd
    amount_paid: float


@dataclass
class SemanticCheckResult:
    """
    Checker verdict.

    errors is free text with no guaranteed vocabulary. field_errors is
    filled only when the checker reports errors per field (camelCase keys).
    """
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    field_errors: Optional[Dict[str, List[str]]] = None


class IApplicationRepository(ABC):
    """
    Interface for application storage.

    Implementations must:
    - Assign a unique id on insert
    - Keep ids immutable on update
    - Return the most recently inserted records first from list()
    """

    @abstractmethod
    async def list(self) -> List['Application']:
        """Get all applications, newest first"""
        pass

    @abstractmethod
    async def get_by_id(self, application_id: str) -> Optional['Application']:
        """
        Get application by ID.

        Returns:
            Application if found, None otherwise
        """
        pass

    @abstractmethod
    async def insert(self, application: 'Application') -> 'Application':
        """
        Store a new application.

        Args:
            application: Validated application (its id is ignored)

        Returns:
            The stored application with its assigned id
        """
        pass

    @abstractmethod
    async def update(self, application_id: str, changes: Dict[str, object]) -> Optional['Application']:
        """
        Merge changes into an existing application.

        Args:
            application_id: Application to change
            changes: Attribute name -> new value ("id" is ignored)

        Returns:
            Updated application, None if not found
        """
        pass

    @abstractmethod
    async def delete(self, application_id: str) -> bool:
        """
        Remove an application.

        Returns:
            True if removed, False if not found
        """
        pass


class ISemanticChecker(ABC):
    """Interface for the AI plausibility check"""

    @abstractmethod
    async def check(self, request: SemanticCheckRequest) -> SemanticCheckResult:
        """
        Judge whether the application data looks plausible.

        Raises:
            SemanticCheckError: If the check itself could not be performed
        """
        pass

"""
Application Service - orchestration of the application mutation pipeline.

Every create/update request goes through the same linear pipeline:

    RECEIVED -> STRUCTURALLY_VALIDATED -> SEMANTICALLY_VALIDATED -> COMMITTED

with an error exit at each stage. Only COMMITTED touches the store, so a
failed request never leaves a partial record behind. Failures are raised
as domain exceptions inside the pipeline and returned as result values at
this service's boundary.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from visa_fees.application.validation import ApplicationInput, validate_application_input
from visa_fees.core.interfaces import (
    IApplicationRepository,
    ISemanticChecker,
    SemanticCheckRequest,
    SemanticCheckResult,
)
from visa_fees.domain.entities import (
    Application,
    ApplicationNotFoundError,
    DomainError,
    FieldErrors,
    SemanticValidationError,
    ServiceUnavailableError,
    StructuralValidationError,
)
from visa_fees.domain.value_objects import EARLIEST_APPLICATION_DATE, is_selectable_application_date

logger = logging.getLogger(__name__)

# Keyword -> field, checked in this order; the first match wins
ERROR_KEYWORDS = (
    ("name", "fullName"),
    ("passport", "passportNumber"),
    ("date", "applicationDate"),
    ("amount", "amountPaid"),
)

GENERIC_SEMANTIC_ERROR = "The application data did not pass AI validation."


class PipelineStage(str, Enum):
    RECEIVED = "received"
    STRUCTURALLY_VALIDATED = "structurally_validated"
    SEMANTICALLY_VALIDATED = "semantically_validated"
    COMMITTED = "committed"


class ErrorKind(str, Enum):
    STRUCTURAL = "structural"
    SEMANTIC = "semantic"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NOT_FOUND = "not_found"


_ERROR_KINDS = {
    StructuralValidationError: ErrorKind.STRUCTURAL,
    SemanticValidationError: ErrorKind.SEMANTIC,
    ServiceUnavailableError: ErrorKind.SERVICE_UNAVAILABLE,
    ApplicationNotFoundError: ErrorKind.NOT_FOUND,
}


@dataclass
class MutationResult:
    """Outcome of create/update"""
    success: bool
    application: Optional[Application] = None
    errors: Optional[Dict[str, List[str]]] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, error: DomainError) -> "MutationResult":
        return cls(success=False, errors=error.errors, error_kind=_ERROR_KINDS[type(error)])

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "application": self.application.to_dict()}
        return {"success": False, "errors": self.errors}


@dataclass
class DeleteResult:
    """Outcome of delete"""
    success: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}


def map_semantic_errors(result: SemanticCheckResult) -> Dict[str, List[str]]:
    """
    Attribute checker errors to form fields.

    Structured field_errors from the checker are used as given. Free-text
    errors not already listed there are matched by keyword (case-insensitive
    substring, ERROR_KEYWORDS order); anything unmatched goes to "root".
    Several errors for one field are kept in order.

    Note: "the date and amount are inconsistent" lands on applicationDate
    only, because "date" is checked before "amount".
    """
    field_errors = FieldErrors()
    already_attributed = set()

    for field_name, messages in (result.field_errors or {}).items():
        for message in messages:
            field_errors.add(field_name, message)
            already_attributed.add(message)

    for error in result.errors:
        if error in already_attributed:
            continue
        lowered = error.lower()
        for keyword, field_name in ERROR_KEYWORDS:
            if keyword in lowered:
                field_errors.add(field_name, error)
                break
        else:
            field_errors.add("root", error)

    if not field_errors:
        field_errors.add("root", GENERIC_SEMANTIC_ERROR)
    return field_errors.errors


class ApplicationService:
    """
    Application service for visa fee applications.

    Orchestrates:
    - Structural validation (schema)
    - Semantic validation (AI checker)
    - Persistence (repository)
    - Refresh signals (post-commit hooks)
    """

    def __init__(
        self,
        repository: IApplicationRepository,
        checker: ISemanticChecker,
        post_commit_hooks: Optional[List[Callable]] = None,
        delete_latency_seconds: float = 0.0,
    ):
        """
        Initialize application service.

        Args:
            repository: Store for applications
            checker: AI semantic checker
            post_commit_hooks: Callables run after each successful mutation
                with (action, application_id); sync or async
            delete_latency_seconds: Simulated latency awaited before a delete
        """
        self._repository = repository
        self._checker = checker
        self._post_commit_hooks: List[Callable] = list(post_commit_hooks or [])
        self._delete_latency_seconds = delete_latency_seconds

    def add_post_commit_hook(self, hook: Callable) -> None:
        """Register a hook run after every committed mutation"""
        self._post_commit_hooks.append(hook)

    # ============================================
    # Queries
    # ============================================

    async def list_applications(self) -> List[Application]:
        return await self._repository.list()

    async def get_application(self, application_id: str) -> Optional[Application]:
        return await self._repository.get_by_id(application_id)

    # ============================================
    # Mutations
    # ============================================

    async def create_application(self, data: Any) -> MutationResult:
        """
        Validate and store a new application.

        Args:
            data: Raw input (form payload)

        Returns:
            MutationResult with the stored application (new id assigned),
            or with field errors and the failing stage's error kind
        """
        self._log_stage("create", PipelineStage.RECEIVED)
        try:
            parsed = validate_application_input(data)
            self._log_stage("create", PipelineStage.STRUCTURALLY_VALIDATED)
            self._note_unselectable_date(parsed)

            await self._check_semantics(parsed)
            self._log_stage("create", PipelineStage.SEMANTICALLY_VALIDATED)

            application = await self._repository.insert(parsed.to_entity())
        except (StructuralValidationError, SemanticValidationError, ServiceUnavailableError) as e:
            logger.info(f"Create rejected: {e}")
            return MutationResult.failure(e)

        self._log_stage("create", PipelineStage.COMMITTED, application.id)
        await self._run_post_commit_hooks("created", application.id)
        return MutationResult(success=True, application=application)

    async def update_application(self, data: Any) -> MutationResult:
        """
        Validate and apply an edit to an existing application.

        Args:
            data: Raw input including the application id

        Returns:
            MutationResult with the updated application, or errors
        """
        self._log_stage("update", PipelineStage.RECEIVED)
        try:
            parsed = validate_application_input(data, require_id=True)
            self._log_stage("update", PipelineStage.STRUCTURALLY_VALIDATED, parsed.id)
            self._note_unselectable_date(parsed)

            if await self._repository.get_by_id(parsed.id) is None:
                raise ApplicationNotFoundError(parsed.id)

            await self._check_semantics(parsed)
            self._log_stage("update", PipelineStage.SEMANTICALLY_VALIDATED, parsed.id)

            application = await self._repository.update(parsed.id, parsed.changes())
            if application is None:
                # Deleted while the semantic check was in flight
                raise ApplicationNotFoundError(parsed.id)
        except DomainError as e:
            logger.info(f"Update rejected: {e}")
            return MutationResult.failure(e)

        self._log_stage("update", PipelineStage.COMMITTED, application.id)
        await self._run_post_commit_hooks("updated", application.id)
        return MutationResult(success=True, application=application)

    async def delete_application(self, application_id: str) -> DeleteResult:
        """
        Delete an application after the simulated latency.

        Deleting an unknown id leaves the store untouched.
        """
        if self._delete_latency_seconds > 0:
            await asyncio.sleep(self._delete_latency_seconds)

        if not await self._repository.delete(application_id):
            logger.warning(f"Delete failed: application {application_id} not found")
            return DeleteResult(success=False, message=ApplicationNotFoundError.MESSAGE)

        await self._run_post_commit_hooks("deleted", application_id)
        return DeleteResult(success=True, message="Application deleted.")

    # ============================================
    # Pipeline helpers
    # ============================================

    async def _check_semantics(self, parsed: ApplicationInput) -> None:
        """
        Run the AI checker.

        Raises:
            ServiceUnavailableError: If the checker call fails for any reason
            SemanticValidationError: If the checker rejects the data
        """
        request = SemanticCheckRequest(
            full_name=parsed.full_name,
            passport_number=parsed.passport_number,
            application_date=parsed.application_date.isoformat(),
            amount_paid=parsed.amount_paid,
        )

        try:
            result = await self._checker.check(request)
        except Exception as e:
            logger.error(f"❌ AI validation failed: {e}", exc_info=True)
            raise ServiceUnavailableError(e) from e

        if not result.is_valid:
            raise SemanticValidationError(map_semantic_errors(result))

    async def _run_post_commit_hooks(self, action: str, application_id: str) -> None:
        """Hook failures are logged; the mutation is already committed."""
        for hook in self._post_commit_hooks:
            try:
                if inspect.iscoroutinefunction(hook):
                    await hook(action, application_id)
                else:
                    hook(action, application_id)
            except Exception as e:
                logger.error(f"❌ Post-commit hook failed: {e}", exc_info=True)

    @staticmethod
    def _note_unselectable_date(parsed: ApplicationInput) -> None:
        """Accepted, but the form's date picker would not have offered this day"""
        if not is_selectable_application_date(parsed.application_date, today=date.today()):
            logger.warning(
                f"⚠️ Application date {parsed.application_date.isoformat()} is outside the form's "
                f"date range ({EARLIEST_APPLICATION_DATE.isoformat()} to today); accepted anyway"
            )

    @staticmethod
    def _log_stage(operation: str, stage: PipelineStage, application_id: Optional[str] = None) -> None:
        suffix = f" ({application_id})" if application_id else ""
        logger.debug(f"{operation}: {stage.value}{suffix}")

"""Core module containing interfaces."""

from visa_fees.core.interfaces import (
    IApplicationRepository,
    ISemanticChecker,
    SemanticCheckRequest,
    SemanticCheckResult,
)

__all__ = [
    "IApplicationRepository",
    "ISemanticChecker",
    "SemanticCheckRequest",
    "SemanticCheckResult",
]

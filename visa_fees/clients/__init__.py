"""Semantic checker clients"""
from visa_fees.clients.semantic_checker import (
    PassThroughSemanticChecker,
    SemanticCheckClient,
    SemanticCheckError,
)

__all__ = ["SemanticCheckClient", "PassThroughSemanticChecker", "SemanticCheckError"]

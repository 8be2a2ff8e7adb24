"""
Domain layer - Visa fee application records and their rules.

This layer contains:
- Value objects (immutable, self-validating)
- The Application entity
- Domain exceptions for every pipeline failure mode

No dependencies on infrastructure or frameworks.
"""

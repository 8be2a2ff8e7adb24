"""
Application layer - Use cases and business logic orchestration.

This layer contains:
- Structural validation of form input
- The application mutation pipeline (ApplicationService)
- Mapping of AI checker errors onto form fields

No direct dependencies on frameworks (FastAPI, etc.)
"""

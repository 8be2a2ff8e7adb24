"""
Tests for the Visa Fee Applications service

Tests are organized by functionality:
- test_validation.py: Structural validation of form input
- test_application_service.py: Mutation pipeline (validation, AI check, commit)
- test_application_repository.py: In-memory store
- test_semantic_checker.py: AI checker client and reply parsing
- test_report_service.py: Filtering, sorting, pagination and CSV export
- test_receipt_service.py: Receipt numbering, HTML and PDF rendering
- test_config.py: Environment settings
- test_logging.py: Log redaction
- api/test_applications_api.py: HTTP endpoints
- api/test_events.py: Refresh-signal event stream
- api/test_dependencies.py: Service container wiring
"""

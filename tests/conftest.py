"""
Pytest configuration and shared fixtures.
"""
import pytest
from fastapi.testclient import TestClient

from visa_fees.api.dependencies import get_application_service, get_receipt_counter
from visa_fees.application.application_service import ApplicationService
from visa_fees.main import app
from visa_fees.repositories.application_repository import InMemoryApplicationRepository
from visa_fees.services.receipt_service import ReceiptCounter
from tests.fakes import FakeSemanticChecker


@pytest.fixture
def valid_payload():
    """Form payload that passes structural validation"""
    return {
        "fullName": "Amina Benali",
        "passportNumber": "A1234567",
        "address": "7 Rue Larbi Ben M'hidi, Algiers",
        "applicationDate": "2024-07-01",
        "amountPaid": "150.50",
    }


@pytest.fixture
def repository():
    """Fresh, empty store for each test"""
    return InMemoryApplicationRepository()


@pytest.fixture
def checker():
    """Semantic checker that accepts everything unless reconfigured"""
    return FakeSemanticChecker()


@pytest.fixture
def service(repository, checker):
    return ApplicationService(repository=repository, checker=checker)


@pytest.fixture
def receipt_counter():
    return ReceiptCounter()


@pytest.fixture
def client(service, receipt_counter):
    """
    TestClient wired to the per-test store and fake checker.

    The lifespan is not entered, so the process-wide container is never built.
    """
    app.dependency_overrides[get_application_service] = lambda: service
    app.dependency_overrides[get_receipt_counter] = lambda: receipt_counter

    yield TestClient(app)

    app.dependency_overrides.clear()

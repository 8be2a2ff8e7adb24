"""
FastAPI dependencies - one service container per process.

The container owns the in-memory store, so its lifetime is the process
lifetime. Tests replace get_application_service / get_receipt_counter via
app.dependency_overrides to get a fresh store per test.
"""
import logging
from typing import Optional

import httpx

from visa_fees.api.events import broadcast_applications_changed
from visa_fees.application.application_service import ApplicationService
from visa_fees.clients.semantic_checker import PassThroughSemanticChecker, SemanticCheckClient
from visa_fees.config import Settings, settings
from visa_fees.core.interfaces import ISemanticChecker
from visa_fees.repositories.application_repository import InMemoryApplicationRepository
from visa_fees.services.receipt_service import ReceiptCounter

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Process-wide wiring of store, checker, service and receipt counter"""

    def __init__(self, app_settings: Settings):
        self.http_client = httpx.AsyncClient()

        if app_settings.seed_demo_data:
            self.repository = InMemoryApplicationRepository.with_demo_data()
        else:
            self.repository = InMemoryApplicationRepository()

        if app_settings.ai_validation_enabled:
            checker: ISemanticChecker = SemanticCheckClient(self.http_client, app_settings)
        else:
            logger.warning("⚠️  AI validation disabled - every structurally valid application is accepted")
            checker = PassThroughSemanticChecker()
        self.checker = checker

        self.service = ApplicationService(
            repository=self.repository,
            checker=self.checker,
            post_commit_hooks=[broadcast_applications_changed],
            delete_latency_seconds=app_settings.delete_latency_seconds,
        )
        self.receipt_counter = ReceiptCounter()

    async def aclose(self) -> None:
        await self.http_client.aclose()


_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    global _container
    if _container is None:
        _container = ServiceContainer(settings)
        logger.info(f"✅ Store ready with {len(_container.repository)} application(s)")
    return _container


async def close_container() -> None:
    global _container
    if _container is not None:
        await _container.aclose()
        _container = None


def get_application_service() -> ApplicationService:
    return get_container().service


def get_receipt_counter() -> ReceiptCounter:
    return get_container().receipt_counter

"""
Application repository for data access.

In-memory store: one ordered list per repository instance, lost on restart.
There is no locking. Every method finishes without awaiting, so within one
event loop each call is atomic, but interleaving across requests is
unordered.
"""

import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Optional

from visa_fees.core.interfaces import IApplicationRepository
from visa_fees.domain.entities import Application

logger = logging.getLogger(__name__)


# Records present on a fresh start when SEED_DEMO_DATA is on
DEMO_APPLICATIONS = (
    Application(
        id="app-01",
        full_name="John Doe",
        passport_number="A1234567",
        address="12 Rue Didouche Mourad, Algiers",
        application_date=date(2024, 5, 15),
        amount_paid=250.0,
    ),
    Application(
        id="app-02",
        full_name="Jane Smith",
        passport_number="B8765432",
        address="Slovenska cesta 9, Ljubljana",
        application_date=date(2024, 6, 1),
        amount_paid=180.5,
    ),
    Application(
        id="app-03",
        full_name="Peter Jones",
        passport_number="C5473829",
        address="4 Boulevard Zighout Youcef, Oran",
        application_date=date(2024, 6, 20),
        amount_paid=320.75,
    ),
)


def generate_application_id() -> str:
    """Generate a new application id: app-{12 hex chars}"""
    return f"app-{uuid.uuid4().hex[:12]}"


class InMemoryApplicationRepository(IApplicationRepository):
    """Repository for Application entity backed by a process-local list"""

    def __init__(self, initial: Iterable[Application] = ()):
        self._applications: List[Application] = [replace(app) for app in initial]

    @classmethod
    def with_demo_data(cls) -> "InMemoryApplicationRepository":
        """Repository pre-filled with the three demo applications"""
        return cls(DEMO_APPLICATIONS)

    async def list(self) -> List[Application]:
        """Get all applications, newest first"""
        return list(self._applications)

    async def get_by_id(self, application_id: str) -> Optional[Application]:
        """Get application by ID"""
        index = self._index_of(application_id)
        return self._applications[index] if index is not None else None

    async def insert(self, application: Application) -> Application:
        """Assign an id and put the application at the front"""
        application_id = generate_application_id()
        while self._index_of(application_id) is not None:
            application_id = generate_application_id()

        stored = application.with_id(application_id)
        self._applications.insert(0, stored)
        logger.info(f"Stored application {application_id} ({len(self._applications)} total)")
        return stored

    async def update(self, application_id: str, changes: Dict[str, object]) -> Optional[Application]:
        """Merge changes into an existing application (id stays the same)"""
        index = self._index_of(application_id)
        if index is None:
            return None

        changes = {key: value for key, value in changes.items() if key != "id"}
        # replace() re-runs Application.__post_init__, so invariants still hold
        updated = replace(self._applications[index], **changes)
        self._applications[index] = updated
        logger.info(f"Updated application {application_id}")
        return updated

    async def delete(self, application_id: str) -> bool:
        """Remove an application"""
        index = self._index_of(application_id)
        if index is None:
            return False

        del self._applications[index]
        logger.info(f"Deleted application {application_id} ({len(self._applications)} left)")
        return True

    def __len__(self) -> int:
        return len(self._applications)

    def _index_of(self, application_id: str) -> Optional[int]:
        for index, application in enumerate(self._applications):
            if application.id == application_id:
                return index
        return None

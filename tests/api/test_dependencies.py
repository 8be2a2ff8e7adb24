"""
Tests for the process-wide service container.
"""
from types import SimpleNamespace

import pytest

from visa_fees.api.dependencies import ServiceContainer
from visa_fees.clients.semantic_checker import PassThroughSemanticChecker, SemanticCheckClient


def make_settings(**overrides):
    values = {
        "seed_demo_data": True,
        "ai_validation_enabled": False,
        "anthropic_api_key": "",
        "ai_model": "claude-3-5-haiku-latest",
        "ai_max_tokens": 512,
        "delete_latency_seconds": 0.0,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.mark.asyncio
async def test_seeded_store_with_ai_disabled():
    container = ServiceContainer(make_settings())
    try:
        assert len(container.repository) == 3
        assert isinstance(container.checker, PassThroughSemanticChecker)
        assert [a.id for a in await container.service.list_applications()] == ["app-01", "app-02", "app-03"]
    finally:
        await container.aclose()


@pytest.mark.asyncio
async def test_empty_store_with_ai_enabled():
    container = ServiceContainer(make_settings(
        seed_demo_data=False,
        ai_validation_enabled=True,
        anthropic_api_key="sk-ant-test-key",
    ))
    try:
        assert len(container.repository) == 0
        assert isinstance(container.checker, SemanticCheckClient)
    finally:
        await container.aclose()


@pytest.mark.asyncio
async def test_commit_publishes_refresh_event(valid_payload):
    from visa_fees.api.events import refresh_broadcaster

    container = ServiceContainer(make_settings(seed_demo_data=False))
    queue = refresh_broadcaster.subscribe()
    try:
        result = await container.service.create_application(valid_payload)

        event = queue.get_nowait()
        assert event.action == "created"
        assert event.application_id == result.application.id
    finally:
        refresh_broadcaster.unsubscribe(queue)
        await container.aclose()

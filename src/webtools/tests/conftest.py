"""Shared fixtures: silent logging, fresh settings, recorded backoff sleeps."""

from __future__ import annotations

import asyncio

import pytest

from webtools.foundation.config import clear_settings_cache
from webtools.runtime.observability import configure_logging
from webtools.runtime.retry import policy as policy_module


@pytest.fixture(autouse=True)
def quiet_logging() -> object:
    configure_logging("none")
    yield
    configure_logging("none")


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Isolate tests from WEBTOOLS_* variables in the developer's environment."""
    import os
    for key in list(os.environ):
        if key.startswith("WEBTOOLS_"):
            monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record backoff sleeps instead of waiting them out."""
    recorded: list[float] = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay: float, result: object = None) -> object:
        recorded.append(delay)
        await real_sleep(0)
        return result

    monkeypatch.setattr(policy_module.asyncio, "sleep", fake_sleep)
    return recorded

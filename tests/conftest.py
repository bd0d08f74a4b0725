"""Shared fixtures for the SyncState test suite."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from syncstate import (
    Environment,
    InProcessBus,
    SyncConfig,
    SynchronizationCoordinator,
)


class RecordingValidator:
    """
    Validation routine that records every call.

    ``rules`` maps a field path to a function returning an error message
    (or None) for the model; ``delays`` maps a field path to seconds slept
    before answering.
    """

    def __init__(self, rules=None, delays=None):
        self.rules = rules or {}
        self.delays = delays or {}
        self.calls: List[tuple] = []

    async def __call__(self, model: Dict[str, Any], field_path: Optional[str]):
        self.calls.append((field_path, model))
        delay = self.delays.get(field_path, 0)
        if delay:
            await asyncio.sleep(delay)

        errors: Dict[str, List[str]] = {}
        targets = self.rules if field_path is None else {field_path: self.rules.get(field_path)}
        for path, rule in targets.items():
            message = rule(model) if rule else None
            if message:
                errors[path] = [message]
        return {"errors": errors, "warnings": {}}

    def calls_for(self, field_path):
        return [model for path, model in self.calls if path == field_path]


@pytest.fixture
def profile():
    return {
        "name": "John Local",
        "email": "john@example.com",
        "address": {"street": "Main St 1", "city": "Springfield"},
        "tags": ["a", "b"],
    }


@pytest.fixture
def validator():
    return RecordingValidator(rules={
        "name": lambda model: None if model.get("name") else "Name is required",
        "email": lambda model: None if "@" in (model.get("email") or "") else "Email is invalid",
    })


@pytest.fixture
def testing_config():
    return SyncConfig.for_environment(Environment.TESTING)


@pytest.fixture
def events():
    return []


@pytest.fixture
def coordinator(profile, validator, testing_config, events):
    bus = InProcessBus()
    bus.subscribe(events.append)
    return SynchronizationCoordinator(
        profile,
        validate=validator,
        config=testing_config,
        bus=bus,
        name="profile",
    )

"""Tests for the debounced, cancelable validation scheduler."""

import asyncio

import pytest

from syncstate import SuiteResult, ValidationResult, ValidationScheduler
from syncstate.validation import RunState


class ModelBox:
    """Mutable model the scheduler reads when a run starts"""

    def __init__(self, value=None):
        self.value = value or {}

    def __call__(self):
        return dict(self.value)


class TestSuiteResult:
    """Normalizing validation routine outcomes"""

    def test_mapping(self):
        result = SuiteResult.coerce({"errors": {"name": ["Required"], "email": []}})
        assert result.errors == {"name": ["Required"]}
        assert result.warnings == {}

    def test_single_message_is_wrapped(self):
        assert SuiteResult.coerce({"errors": {"name": "Required"}}).errors == {"name": ["Required"]}

    def test_object_with_attributes(self):
        class Outcome:
            errors = {"name": ["Required"]}
            warnings = {"name": ["Short"]}

        result = SuiteResult.coerce(Outcome())
        assert result.has_errors("name")
        assert result.warnings == {"name": ["Short"]}

    def test_none(self):
        assert not SuiteResult.coerce(None).has_errors()


class TestValidationResult:
    """Field-by-field consolidated result"""

    def test_set_entries_replaces_and_clears(self):
        result = ValidationResult()
        result.set_entries("name", ["Required"], [])
        result.set_entries("email", ["Invalid"], ["Unusual domain"])
        result.set_entries("name", [], [])

        assert result.errors == {"email": ["Invalid"]}
        assert result.warnings == {"email": ["Unusual domain"]}
        assert not result.is_valid

    def test_snapshot_is_independent(self):
        result = ValidationResult(errors={"name": ["Required"]}, pending_fields={"email"})
        snapshot = result.snapshot()
        result.errors["name"].append("Too short")
        result.pending_fields.clear()

        assert snapshot.errors == {"name": ["Required"]}
        assert snapshot.is_pending


class TestValidationScheduler:
    """Debounce, supersession and failure containment"""

    @pytest.mark.asyncio
    async def test_debounce_collapses_bursts(self):
        model = ModelBox({"username": ""})
        seen = []

        def validate(value, field_path):
            seen.append(value["username"])
            return {"errors": {}}

        scheduler = ValidationScheduler(validate, model, debounce_ms=50)
        for text in ("t", "ta", "tak"):
            model.value["username"] = text
            scheduler.request_validation("username")
            await asyncio.sleep(0.01)

        await scheduler.drain()

        assert seen == ["tak"]
        assert scheduler.executions == 1

    @pytest.mark.asyncio
    async def test_superseded_result_is_discarded(self):
        model = ModelBox({"email": "slow@example.com"})

        async def validate(value, field_path):
            if value["email"].startswith("slow"):
                await asyncio.sleep(0.05)
                return {"errors": {"email": ["Stale error"]}}
            return {"errors": {"email": ["Fresh error"]}}

        scheduler = ValidationScheduler(validate, model)
        scheduler.request_validation("email")
        await asyncio.sleep(0.01)
        assert scheduler.state_of("email") is RunState.RUNNING

        model.value["email"] = "fast@example.com"
        scheduler.request_validation("email")
        await scheduler.drain()
        await asyncio.sleep(0.06)

        assert scheduler.current.errors == {"email": ["Fresh error"]}
        assert scheduler.executions == 2

    @pytest.mark.asyncio
    async def test_fields_validate_independently(self):
        async def validate(value, field_path):
            await asyncio.sleep(0.01)
            return {"errors": {field_path: [f"{field_path} error"]}}

        scheduler = ValidationScheduler(validate, ModelBox())
        scheduler.request_validation("a")
        scheduler.request_validation("b")
        assert scheduler.pending_fields() == ["a", "b"]

        result = await scheduler.drain()

        assert result.errors == {"a": ["a error"], "b": ["b error"]}
        assert not result.is_pending

    @pytest.mark.asyncio
    async def test_routine_failure_becomes_field_error(self):
        def validate(value, field_path):
            raise RuntimeError("backend down")

        scheduler = ValidationScheduler(validate, ModelBox(), failure_message="Validation failed")
        result = await scheduler.validate_now("name")

        assert result.errors == {"name": ["Validation failed"]}
        assert "name" not in result.pending_fields

    @pytest.mark.asyncio
    async def test_failure_does_not_abort_other_fields(self):
        async def validate(value, field_path):
            await asyncio.sleep(0.01)
            if field_path == "email":
                raise ConnectionError("lookup unavailable")
            return {"errors": {field_path: [f"{field_path} is too short"]}}

        scheduler = ValidationScheduler(validate, ModelBox(), failure_message="Validation failed")
        scheduler.request_validation("email")
        scheduler.request_validation("name")

        result = await scheduler.drain()

        assert result.errors == {"email": ["Validation failed"], "name": ["name is too short"]}
        assert not result.is_pending

    @pytest.mark.asyncio
    async def test_slow_run_does_not_overwrite_newer_result_of_other_field(self):
        async def validate(value, field_path):
            if field_path == "password":
                await asyncio.sleep(0.05)
                return {"errors": {"confirm": ["Passwords differ"]}}
            return {"errors": {}}

        scheduler = ValidationScheduler(validate, ModelBox())
        scheduler.request_validation("password")
        await asyncio.sleep(0.01)
        scheduler.request_validation("confirm")

        result = await scheduler.drain()

        assert result.errors == {}

    @pytest.mark.asyncio
    async def test_slow_run_skips_field_with_outstanding_run(self):
        async def validate(value, field_path):
            if field_path == "password":
                await asyncio.sleep(0.01)
                return {"errors": {"confirm": ["Passwords differ"]}}
            await asyncio.sleep(0.05)
            return {"errors": {"confirm": ["Confirmation required"]}}

        scheduler = ValidationScheduler(validate, ModelBox())
        scheduler.request_validation("password")
        scheduler.request_validation("confirm")

        await asyncio.sleep(0.03)
        assert "confirm" not in scheduler.current.errors

        result = await scheduler.drain()

        assert result.errors == {"confirm": ["Confirmation required"]}

    @pytest.mark.asyncio
    async def test_other_field_entries_apply_without_newer_run(self):
        def validate(value, field_path):
            return {"errors": {"confirm": ["Passwords differ"]}}

        scheduler = ValidationScheduler(validate, ModelBox())
        result = await scheduler.validate_now("password")

        assert result.errors == {"confirm": ["Passwords differ"]}

    @pytest.mark.asyncio
    async def test_requested_field_result_replaces_its_entries(self):
        answers = iter([
            {"errors": {"name": ["Required"], "rootForm": ["Incomplete"]}},
            {"errors": {}},
        ])

        scheduler = ValidationScheduler(lambda value, field_path: next(answers), ModelBox())
        await scheduler.validate_now("name")
        result = await scheduler.validate_now("name")

        assert result.errors == {"rootForm": ["Incomplete"]}

    @pytest.mark.asyncio
    async def test_root_key_validates_whole_model(self):
        calls = []

        def validate(value, field_path):
            calls.append(field_path)
            return {"errors": {"rootForm": ["Passwords differ"]}}

        scheduler = ValidationScheduler(validate, ModelBox(), root_form_key="rootForm")
        result = await scheduler.validate_now("rootForm")

        assert calls == [None]
        assert result.errors == {"rootForm": ["Passwords differ"]}

    @pytest.mark.asyncio
    async def test_publishes_through_result_signal(self):
        published = []
        scheduler = ValidationScheduler(lambda value, field_path: {"errors": {"name": ["Required"]}}, ModelBox())
        scheduler.result.subscribe(lambda name, new, old: published.append(new))

        await scheduler.validate_now("name")

        assert published[0].pending_fields == {"name"}
        assert published[-1].errors == {"name": ["Required"]}
        assert not published[-1].is_pending

    @pytest.mark.asyncio
    async def test_clear_field_and_reset(self):
        scheduler = ValidationScheduler(lambda value, field_path: {"errors": {field_path: ["bad"]}}, ModelBox())
        await scheduler.validate_now("a")
        await scheduler.validate_now("b")

        scheduler.clear_field("a")
        assert scheduler.current.errors == {"b": ["bad"]}

        scheduler.request_validation("b", debounce_ms=50)
        scheduler.reset()
        await asyncio.sleep(0.06)

        assert scheduler.current.errors == {}
        assert not scheduler.has_outstanding

    def test_without_event_loop_validation_is_skipped(self):
        scheduler = ValidationScheduler(lambda value, field_path: {}, ModelBox())
        assert scheduler.request_validation("name") is None
        assert scheduler.current.pending_fields == set()

    @pytest.mark.asyncio
    async def test_no_routine_means_no_runs(self):
        scheduler = ValidationScheduler(None, ModelBox())
        assert scheduler.request_validation("name") is None
        assert (await scheduler.drain()).is_valid

"""
Validation Scheduler - Debounced, Cancelable Per-Field Validation

Each field path owns at most one current validation run. A run moves
through ``SCHEDULED -> RUNNING -> RESOLVED``; requesting validation again
for the same field supersedes the current run: a scheduled run has its
debounce timer cancelled, a running run is left to finish but its result
is discarded on arrival. Only the most recently requested run for a field
ever writes to the consolidated result.
Entries a run reports for other paths are dropped when a newer run for
that path is outstanding or has already written it.

Runs for different fields are independent and may be in flight at the
same time. Suspension points are the debounce sleep and the validation
routine itself.
"""

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..core.signals import Signal
from .results import SuiteResult, ValidationResult

logger = logging.getLogger(__name__)

ValidationRoutine = Callable[[Any, Optional[str]], Union[Any, Awaitable[Any]]]
ModelProvider = Callable[[], Any]


class RunState(Enum):
    """Lifecycle of one validation run"""
    SCHEDULED = "scheduled"
    RUNNING = "running"
    RESOLVED = "resolved"
    SUPERSEDED = "superseded"


@dataclass
class ValidationRun:
    """One requested validation of one field"""
    field_path: str
    generation: int
    delay_ms: float
    state: RunState = RunState.SCHEDULED
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def superseded(self) -> bool:
        return self.state is RunState.SUPERSEDED


class ValidationScheduler:
    """
    Owns one debounce timer per field and publishes the consolidated result.

    Args:
        validate: Routine called as ``validate(model, field_path)``; may be async.
            Called with ``field_path=None`` when the root form key is validated.
        model_provider: Returns the current model value when a run starts
        debounce_ms: Default debounce window
        failure_message: Error recorded when the routine raises
        root_form_key: Key under which form-level errors are reported
    """

    def __init__(
        self,
        validate: Optional[ValidationRoutine],
        model_provider: ModelProvider,
        debounce_ms: float = 0,
        failure_message: str = "Validation failed",
        root_form_key: str = "rootForm",
    ):
        self._validate = validate
        self._model_provider = model_provider
        self.debounce_ms = debounce_ms
        self.failure_message = failure_message
        self.root_form_key = root_form_key

        self._runs: Dict[str, ValidationRun] = {}
        self._generations = itertools.count(1)
        self._result = ValidationResult()
        self._written: Dict[str, int] = {}
        self.result: Signal[ValidationResult] = Signal(ValidationResult(), name="validation")
        self.executions = 0

    @property
    def current(self) -> ValidationResult:
        return self.result.value

    @property
    def has_outstanding(self) -> bool:
        return bool(self._runs)

    def state_of(self, field_path: str) -> Optional[RunState]:
        run = self._runs.get(field_path)
        return run.state if run else None

    def request_validation(self, field_path: str, debounce_ms: Optional[float] = None) -> Optional[asyncio.Task]:
        """
        Schedule validation of ``field_path`` after the debounce window.

        Any scheduled or running validation for the same field is superseded.

        Returns:
            The task executing the new run, or None when no routine is
            configured or no event loop is running
        """
        if self._validate is None:
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, skipping validation of %r", field_path)
            return None

        previous = self._runs.get(field_path)
        if previous is not None:
            self._supersede(previous)

        delay = self.debounce_ms if debounce_ms is None else debounce_ms
        run = ValidationRun(field_path, next(self._generations), delay)
        run.task = loop.create_task(self._execute(run))
        self._runs[field_path] = run

        if field_path not in self._result.pending_fields:
            self._result.pending_fields.add(field_path)
            self._publish()

        logger.debug("Scheduled validation #%d for %r in %sms", run.generation, field_path, delay)
        return run.task

    def cancel(self, field_path: str) -> None:
        """Supersede any outstanding run for ``field_path`` and drop its pending flag"""
        run = self._runs.pop(field_path, None)
        if run is not None:
            self._supersede(run)
        if field_path in self._result.pending_fields:
            self._result.pending_fields.discard(field_path)
            self._publish()

    def clear_field(self, field_path: str) -> None:
        """Cancel outstanding work for a field and remove its entries"""
        run = self._runs.pop(field_path, None)
        if run is not None:
            self._supersede(run)
        self._result.clear_field(field_path)
        self._written.pop(field_path, None)
        self._publish()

    async def validate_now(self, field_path: str) -> ValidationResult:
        """Validate one field immediately and wait for the outcome"""
        task = self.request_validation(field_path, debounce_ms=0)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        return self.current

    async def drain(self) -> ValidationResult:
        """Wait until no validation run is scheduled or running"""
        while self._runs:
            tasks = [run.task for run in self._runs.values() if run.task is not None]
            if not tasks:
                break
            await asyncio.gather(*tasks, return_exceptions=True)
        return self.current

    def reset(self) -> None:
        """Supersede every outstanding run and clear all results"""
        for run in list(self._runs.values()):
            self._supersede(run)
        self._runs.clear()
        self._result.clear()
        self._written.clear()
        self._publish()

    def _supersede(self, run: ValidationRun) -> None:
        if run.state is RunState.SCHEDULED and run.task is not None:
            run.task.cancel()
        if run.state in (RunState.SCHEDULED, RunState.RUNNING):
            logger.debug("Superseding validation #%d for %r (%s)", run.generation, run.field_path, run.state.value)
            run.state = RunState.SUPERSEDED

    async def _execute(self, run: ValidationRun) -> None:
        try:
            if run.delay_ms > 0:
                await asyncio.sleep(run.delay_ms / 1000)
            if run.superseded:
                return

            run.state = RunState.RUNNING
            outcome = await self._invoke(run.field_path)

            if run.superseded or self._runs.get(run.field_path) is not run:
                logger.debug("Discarding result of superseded validation #%d for %r", run.generation, run.field_path)
                return

            self._apply(run, outcome)
            run.state = RunState.RESOLVED
        finally:
            if self._runs.get(run.field_path) is run:
                del self._runs[run.field_path]
                self._result.pending_fields.discard(run.field_path)
                self._publish()

    async def _invoke(self, field_path: str) -> SuiteResult:
        model = self._model_provider()
        routine_field = None if field_path == self.root_form_key else field_path
        self.executions += 1
        try:
            outcome = self._validate(model, routine_field)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            return SuiteResult.coerce(outcome)
        except Exception as e:
            logger.warning("Validation routine failed for %r: %s", field_path, e)
            return SuiteResult(errors={field_path: [self.failure_message]})

    def _apply(self, run: ValidationRun, outcome: SuiteResult) -> None:
        touched = {run.field_path} | set(outcome.errors) | set(outcome.warnings)

        for path in touched:
            if path != run.field_path and self._is_newer_than(path, run):
                logger.debug("Validation #%d for %r skips %r, a newer run owns it", run.generation, run.field_path, path)
                continue
            self._result.set_entries(
                path,
                outcome.errors.get(path, []),
                outcome.warnings.get(path, []),
            )
            self._written[path] = run.generation

    def _is_newer_than(self, path: str, run: ValidationRun) -> bool:
        current = self._runs.get(path)
        if current is not None and current.generation > run.generation:
            return True
        return self._written.get(path, 0) > run.generation

    def _publish(self) -> None:
        self.result.set(self._result.snapshot())

    def pending_fields(self) -> List[str]:
        return sorted(self._result.pending_fields)

"""Step wizard state machine.

State is ``(current_step, data)`` with ``current_step`` in ``[1, N]`` and
``data`` an immutable form value. Transitions:

- next():      validate current step; advance (capped at N) only if it passes
- previous():  step back (floored at 1), never validated
- reset():     initial data, step 1
- submit():    only at step N; validate step N plus the cumulative check,
               hand the data to the submit action, then reset

Rejected transitions leave step and data untouched. A failed submit
(validation, storage, timeout, cancellation) also keeps the user's input.
"""

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from econboard.errors import (
    RecordValidationError,
    SubmitTimeoutError,
    Violation,
    WizardBusyError,
    WizardStateError,
)

logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")

StepValidator = Callable[[Any], list[Violation]]


@dataclass(frozen=True)
class WizardStep:
    """One screen of a wizard and the rule that gates leaving it forward."""

    title: str
    validate: StepValidator


@dataclass(frozen=True)
class StepOutcome:
    """Result of a next() call."""

    advanced: bool
    step: int
    violations: tuple[Violation, ...] = ()


class StepWizard(Generic[S, R]):
    """Bounded sequence of data-entry steps over one form value.

    Rendering code reads ``data``; changes go through ``update()`` so the
    wizard stays the only writer.
    """

    def __init__(
        self,
        *,
        name: str,
        steps: Sequence[WizardStep],
        initial: Callable[[], S],
        action: Callable[[S], Awaitable[R]],
        final_check: StepValidator | None = None,
        timeout: float | None = None,
    ) -> None:
        if not steps:
            msg = "A wizard needs at least one step."
            raise ValueError(msg)
        self._name = name
        self._steps = tuple(steps)
        self._initial = initial
        self._action = action
        self._final_check = final_check
        self._timeout = timeout or None
        self._step = 1
        self._data = initial()
        self._errors: tuple[Violation, ...] = ()
        self._submitting = False

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def step_count(self) -> int:
        return len(self._steps)

    @property
    def current_step(self) -> int:
        return self._step

    @property
    def current_title(self) -> str:
        return self._steps[self._step - 1].title

    @property
    def data(self) -> S:
        return self._data

    @property
    def errors(self) -> tuple[Violation, ...]:
        """Violations from the last rejected transition."""
        return self._errors

    @property
    def is_last_step(self) -> bool:
        return self._step == self.step_count

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _ensure_idle(self) -> None:
        if self._submitting:
            msg = f"{self._name}: a submit is in progress."
            raise WizardBusyError(msg)

    def update(self, **changes: Any) -> S:
        """Replace form fields. Unknown field names raise TypeError."""
        self._ensure_idle()
        self._data = dataclasses.replace(self._data, **changes)
        return self._data

    def validate(self, step: int | None = None) -> list[Violation]:
        """Run one step's validator against the current data."""
        step = self._step if step is None else step
        if not 1 <= step <= self.step_count:
            msg = f"{self._name}: step {step} is outside 1..{self.step_count}."
            raise WizardStateError(msg)
        return list(self._steps[step - 1].validate(self._data))

    def next(self) -> StepOutcome:
        self._ensure_idle()
        violations = self.validate()
        if violations:
            self._errors = tuple(violations)
            logger.debug("%s: step %d blocked (%d violations)", self._name, self._step, len(violations))
            return StepOutcome(advanced=False, step=self._step, violations=self._errors)

        previous = self._step
        self._step = min(self._step + 1, self.step_count)
        self._errors = ()
        logger.debug("%s: step %d -> %d", self._name, previous, self._step)
        return StepOutcome(advanced=self._step != previous, step=self._step)

    def previous(self) -> int:
        self._ensure_idle()
        self._step = max(self._step - 1, 1)
        self._errors = ()
        return self._step

    def reset(self) -> None:
        self._ensure_idle()
        self._data = self._initial()
        self._step = 1
        self._errors = ()

    async def submit(self) -> R:
        """Validate the last step (and the cumulative check), save, reset.

        Raises:
            WizardStateError: not on the last step.
            WizardBusyError: another submit is in flight.
            RecordValidationError: a rule rejected the data.
            SubmitTimeoutError: the save did not finish within the timeout.
            RecordNotFoundError / StorageError: from the submit action.
        """
        self._ensure_idle()
        if not self.is_last_step:
            msg = f"{self._name}: submit is only allowed on step {self.step_count}."
            raise WizardStateError(msg)

        violations = self.validate(self.step_count)
        if not violations and self._final_check is not None:
            violations = list(self._final_check(self._data))
        if violations:
            self._errors = tuple(violations)
            raise RecordValidationError(violations)

        self._submitting = True
        try:
            async with asyncio.timeout(self._timeout):
                result = await self._action(self._data)
        except TimeoutError as exc:
            logger.warning("%s: submit timed out after %ss", self._name, self._timeout)
            msg = f"{self._name}: save did not complete in time; your input was kept."
            raise SubmitTimeoutError(msg) from exc
        finally:
            self._submitting = False

        self.reset()
        logger.info("%s: submitted", self._name)
        return result

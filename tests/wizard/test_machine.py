"""Tests for the step wizard state machine — econboard/wizard/machine.py.

Covers: step gating, previous/next bounds, reset idempotence, submit
preconditions, busy state, timeout and cancellation keeping user input.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import pytest

from econboard.errors import (
    RecordValidationError,
    StorageError,
    SubmitTimeoutError,
    ViolationKind,
    WizardBusyError,
    WizardStateError,
)
from econboard.validation.shares import check_positive
from econboard.wizard.machine import StepWizard, WizardStep


@dataclass(frozen=True)
class PairForm:
    first: Any = None
    second: Any = None


def _wizard(action=None, *, final_check=None, timeout=None) -> StepWizard:
    async def echo(form: PairForm) -> PairForm:
        return form

    return StepWizard(
        name="pair",
        steps=[
            WizardStep("First", lambda f: check_positive(f.first, field="first")),
            WizardStep("Second", lambda f: check_positive(f.second, field="second")),
        ],
        initial=PairForm,
        action=action or echo,
        final_check=final_check,
        timeout=timeout,
    )


def _at_last_step(wizard: StepWizard) -> StepWizard:
    wizard.update(first=1, second=2)
    assert wizard.next().advanced
    assert wizard.is_last_step
    return wizard


# ===================================================================
# Construction and state
# ===================================================================


class TestInitialState:
    def test_starts_at_step_one(self) -> None:
        wizard = _wizard()
        assert wizard.current_step == 1
        assert wizard.step_count == 2
        assert wizard.current_title == "First"
        assert wizard.data == PairForm()
        assert wizard.errors == ()

    def test_requires_steps(self) -> None:
        with pytest.raises(ValueError):
            StepWizard(name="empty", steps=[], initial=PairForm, action=None)

    def test_update_replaces_data(self) -> None:
        wizard = _wizard()
        before = wizard.data
        wizard.update(first="5255")
        assert wizard.data.first == "5255"
        assert before.first is None

    def test_update_unknown_field(self) -> None:
        with pytest.raises(TypeError):
            _wizard().update(third=1)


# ===================================================================
# Gating
# ===================================================================


class TestGating:
    def test_invalid_step_blocks(self) -> None:
        wizard = _wizard()
        wizard.update(first=0)
        outcome = wizard.next()
        assert not outcome.advanced
        assert outcome.step == 1
        assert wizard.current_step == 1
        assert [v.kind for v in outcome.violations] == [ViolationKind.OUT_OF_RANGE]
        assert wizard.errors == outcome.violations

    def test_valid_step_advances(self) -> None:
        wizard = _wizard()
        wizard.update(first=5255)
        outcome = wizard.next()
        assert outcome.advanced
        assert outcome.step == 2
        assert outcome.violations == ()

    def test_blocked_next_keeps_data(self) -> None:
        wizard = _wizard()
        wizard.update(first="abc")
        wizard.next()
        assert wizard.data == PairForm(first="abc")

    def test_success_clears_errors(self) -> None:
        wizard = _wizard()
        wizard.next()
        assert wizard.errors
        wizard.update(first=1)
        wizard.next()
        assert wizard.errors == ()

    def test_next_capped_at_last_step(self) -> None:
        wizard = _at_last_step(_wizard())
        outcome = wizard.next()
        assert not outcome.advanced
        assert wizard.current_step == 2

    def test_previous_floored_at_one(self) -> None:
        wizard = _wizard()
        assert wizard.previous() == 1
        assert wizard.current_step == 1

    def test_previous_is_never_validated(self) -> None:
        wizard = _at_last_step(_wizard())
        wizard.update(first=None)
        assert wizard.previous() == 1

    def test_validate_other_step(self) -> None:
        wizard = _wizard()
        assert wizard.validate(2)[0].field == "second"
        with pytest.raises(WizardStateError):
            wizard.validate(3)


class TestReset:
    def test_reset_restores_initial(self) -> None:
        wizard = _at_last_step(_wizard())
        wizard.reset()
        assert wizard.current_step == 1
        assert wizard.data == PairForm()

    def test_reset_is_idempotent(self) -> None:
        wizard = _at_last_step(_wizard())
        wizard.reset()
        state = (wizard.current_step, wizard.data, wizard.errors)
        wizard.reset()
        assert (wizard.current_step, wizard.data, wizard.errors) == state


# ===================================================================
# Submit
# ===================================================================


class TestSubmit:
    @pytest.mark.anyio
    async def test_submit_only_on_last_step(self) -> None:
        wizard = _wizard()
        wizard.update(first=1, second=2)
        with pytest.raises(WizardStateError):
            await wizard.submit()
        assert wizard.current_step == 1

    @pytest.mark.anyio
    async def test_submit_returns_result_and_resets(self) -> None:
        wizard = _at_last_step(_wizard())
        result = await wizard.submit()
        assert result == PairForm(first=1, second=2)
        assert wizard.current_step == 1
        assert wizard.data == PairForm()

    @pytest.mark.anyio
    async def test_invalid_last_step_keeps_state(self) -> None:
        calls = []

        async def record(form):
            calls.append(form)

        wizard = _at_last_step(_wizard(record))
        wizard.update(second=-1)
        with pytest.raises(RecordValidationError) as exc_info:
            await wizard.submit()
        assert exc_info.value.kinds == {ViolationKind.OUT_OF_RANGE}
        assert calls == []
        assert wizard.current_step == 2
        assert wizard.data.second == -1

    @pytest.mark.anyio
    async def test_final_check_runs(self) -> None:
        def not_equal(form):
            return check_positive(form.second - form.first, field="second")

        wizard = _wizard(final_check=not_equal)
        wizard.update(first=2, second=2)
        wizard.next()
        with pytest.raises(RecordValidationError):
            await wizard.submit()
        assert wizard.current_step == 2

    @pytest.mark.anyio
    async def test_storage_error_keeps_state(self) -> None:
        async def broken(form):
            raise StorageError("down")

        wizard = _at_last_step(_wizard(broken))
        with pytest.raises(StorageError):
            await wizard.submit()
        assert wizard.current_step == 2
        assert wizard.data == PairForm(first=1, second=2)
        assert not wizard.is_submitting


class TestSubmitInFlight:
    @pytest.mark.anyio
    async def test_transitions_rejected_while_submitting(self) -> None:
        release = asyncio.Event()

        async def slow(form):
            await release.wait()
            return form

        wizard = _at_last_step(_wizard(slow))
        task = asyncio.create_task(wizard.submit())
        await asyncio.sleep(0)

        assert wizard.is_submitting
        with pytest.raises(WizardBusyError):
            wizard.next()
        with pytest.raises(WizardBusyError):
            wizard.previous()
        with pytest.raises(WizardBusyError):
            wizard.update(first=9)
        with pytest.raises(WizardBusyError):
            await wizard.submit()

        release.set()
        assert await task == PairForm(first=1, second=2)
        assert not wizard.is_submitting
        assert wizard.current_step == 1

    @pytest.mark.anyio
    async def test_timeout_keeps_state(self) -> None:
        async def hang(form):
            await asyncio.sleep(10)

        wizard = _at_last_step(_wizard(hang, timeout=0.01))
        with pytest.raises(SubmitTimeoutError):
            await wizard.submit()
        assert not wizard.is_submitting
        assert wizard.current_step == 2
        assert wizard.data == PairForm(first=1, second=2)

    @pytest.mark.anyio
    async def test_timeout_is_a_storage_error(self) -> None:
        async def hang(form):
            await asyncio.sleep(10)

        wizard = _at_last_step(_wizard(hang, timeout=0.01))
        with pytest.raises(StorageError):
            await wizard.submit()

    @pytest.mark.anyio
    async def test_cancellation_propagates_and_keeps_state(self) -> None:
        started = asyncio.Event()

        async def hang(form):
            started.set()
            await asyncio.sleep(10)

        wizard = _at_last_step(_wizard(hang))
        task = asyncio.create_task(wizard.submit())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not wizard.is_submitting
        assert wizard.current_step == 2
        assert wizard.data == PairForm(first=1, second=2)

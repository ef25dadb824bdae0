"""Session state machine — pure progress arithmetic, no I/O.

A session's progress is the triple (current_step, completed_steps, status).
The only transition is "step N submitted":

  1. N joins completed_steps (once; repeats are no-ops on the set)
  2. current_step becomes min(N + 1, 5); step 5 leaves it at 5
  3. N == 5 sets status to ``completed``; any other step leaves the
     status as it was

``completed`` is terminal: later submissions never move a session back
to ``in_progress``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable

from intake_db.models.enums import SessionStatus

from intake_workflow.constants import ALL_STEPS, FIRST_STEP, LAST_STEP
from intake_workflow.errors import StorageFailure, ValidationError


@dataclass(frozen=True)
class SessionProgress:
    """Immutable snapshot of where a session stands."""

    current_step: int
    completed_steps: tuple[int, ...]
    status: SessionStatus

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED


def initial_progress() -> SessionProgress:
    """Progress of a freshly created session."""
    return SessionProgress(
        current_step=FIRST_STEP,
        completed_steps=(),
        status=SessionStatus.IN_PROGRESS,
    )


def validate_step(step: int) -> int:
    """Return ``step`` if it names one of the five steps, else raise."""
    if isinstance(step, bool) or not isinstance(step, int) or step not in ALL_STEPS:
        raise ValidationError(
            f"Invalid step: {step!r} (expected {FIRST_STEP}-{LAST_STEP})"
        )
    return step


def advance(progress: SessionProgress, step: int) -> SessionProgress:
    """Apply "step submitted" to ``progress`` and return the new snapshot."""
    validate_step(step)

    completed = progress.completed_steps
    if step not in completed:
        completed = completed + (step,)

    if step == LAST_STEP:
        status = SessionStatus.COMPLETED
    else:
        status = progress.status

    return SessionProgress(
        current_step=min(step + 1, LAST_STEP),
        completed_steps=completed,
        status=status,
    )


def progress_of(row) -> SessionProgress:
    """Read a :class:`SessionProgress` off an ``IntakeSession`` row.

    Raises:
        StorageFailure: the stored progress columns are corrupt.
    """
    try:
        return SessionProgress(
            current_step=validate_step(row.current_step),
            completed_steps=parse_completed_steps(row.completed_steps),
            status=SessionStatus(row.status),
        )
    except ValueError as exc:
        raise StorageFailure(f"Corrupt progress on session id={row.id}: {exc}") from exc


def parse_completed_steps(raw: str | Iterable[int] | None) -> tuple[int, ...]:
    """Decode a stored completed-steps value into a duplicate-free tuple.

    Accepts the JSON text form (``"[1, 2]"``) as well as an already-decoded
    list, which is what the JSONB column yields.  First-seen order is kept.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Malformed completed_steps: {raw!r}") from exc
        if not isinstance(raw, list):
            raise ValidationError(f"completed_steps must be a JSON array, got {raw!r}")

    steps: list[int] = []
    for value in raw:
        step = validate_step(value)
        if step not in steps:
            steps.append(step)
    return tuple(steps)

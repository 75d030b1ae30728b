"""Lock/edit state machine of the weekly plan."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..domain.errors import PlanLocked

logger = logging.getLogger(__name__)


class PlanState(str, Enum):
    NO_PLAN = "no_plan"
    SAVED = "saved"
    EDITING = "editing"
    ROTATION = "rotation"


class InvalidTransition(RuntimeError):
    """Raised when a transition is not allowed from the current state."""


class PlanLifecycle:
    """Explicit plan state; transition methods are the only way to change it.

    ``NO_PLAN`` and ``EDITING`` allow grid mutation. ``SAVED`` is read-only
    until unlocked. ``ROTATION`` marks a week governed by rotation mode, with or
    without history for it; it carries no plan id and cannot be unlocked.
    """

    def __init__(self) -> None:
        self._state = PlanState.NO_PLAN
        self._plan_id: Optional[int] = None

    def __repr__(self) -> str:
        return f"PlanLifecycle(state={self._state.value!r}, plan_id={self._plan_id!r})"

    @property
    def state(self) -> PlanState:
        return self._state

    @property
    def plan_id(self) -> Optional[int]:
        return self._plan_id

    @property
    def can_mutate(self) -> bool:
        return self._state in (PlanState.NO_PLAN, PlanState.EDITING)

    @property
    def is_persisted(self) -> bool:
        return self._plan_id is not None

    def check_mutable(self) -> Optional[PlanLocked]:
        if self.can_mutate:
            return None
        return PlanLocked(rotation=self._state is PlanState.ROTATION)

    # -- transitions --------------------------------------------------------------
    def _move(self, state: PlanState, plan_id: Optional[int]) -> None:
        logger.debug("Plan state %s -> %s (plan %s)", self._state.value, state.value, plan_id)
        self._state = state
        self._plan_id = plan_id

    def saved(self, plan_id: int) -> None:
        if self._state is PlanState.NO_PLAN:
            self._move(PlanState.SAVED, plan_id)
        elif self._state is PlanState.EDITING:
            if plan_id != self._plan_id:
                raise InvalidTransition(f"Update returned plan {plan_id}, expected {self._plan_id}")
            self._move(PlanState.SAVED, plan_id)
        else:
            raise InvalidTransition(f"Cannot save from state {self._state.value}")

    def unlock(self) -> None:
        if self._state is not PlanState.SAVED:
            raise InvalidTransition(f"Cannot unlock from state {self._state.value}")
        self._move(PlanState.EDITING, self._plan_id)

    def deleted(self) -> None:
        if self._state not in (PlanState.SAVED, PlanState.EDITING):
            raise InvalidTransition(f"Cannot delete from state {self._state.value}")
        self._move(PlanState.NO_PLAN, None)

    def reset(self) -> None:
        self._move(PlanState.NO_PLAN, None)

    def loaded(self, plan_id: Optional[int]) -> None:
        """Record the outcome of loading a week from the backend."""

        if plan_id is None:
            self._move(PlanState.NO_PLAN, None)
        else:
            self._move(PlanState.SAVED, plan_id)

    def rotation_locked(self) -> None:
        self._move(PlanState.ROTATION, None)


__all__ = ["InvalidTransition", "PlanLifecycle", "PlanState"]

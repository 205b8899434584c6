"""Step navigation controller for the upload wizard."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from models.listing import FIRST_STEP, LAST_STEP, normalize_visited_steps
from utils.logging_context import set_wizard_step
from wizard.validation import ensure_step

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationState:
    """Immutable view of the step triple that gets persisted."""

    current_step: int
    visited_steps: tuple[int, ...]


class NavigationController:
    """Own the current step and the set of steps reached so far.

    Forward navigation is never blocked by validation errors; the submission
    collaborator performs the final aggregate check. Jumps via
    :meth:`go_to_step` are limited to steps reached through :meth:`go_next`.
    """

    def __init__(
        self,
        *,
        current_step: int = FIRST_STEP,
        visited_steps: Iterable[int] | None = None,
        on_leave_step: Callable[[int], None] | None = None,
        on_change: Callable[[NavigationState], None] | None = None,
    ) -> None:
        self._current_step = FIRST_STEP
        self._visited: list[int] = [FIRST_STEP]
        self._on_leave_step = on_leave_step
        self._on_change = on_change
        self.restore(current_step, visited_steps)

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def visited_steps(self) -> tuple[int, ...]:
        return tuple(self._visited)

    @property
    def state(self) -> NavigationState:
        return NavigationState(current_step=self._current_step, visited_steps=tuple(self._visited))

    def can_navigate_to_step(self, step: int) -> bool:
        return ensure_step(step) in self._visited

    def go_next(self) -> bool:
        """Advance one step, marking the step being left as touched."""

        if self._current_step >= LAST_STEP:
            return False
        leaving = self._current_step
        if self._on_leave_step is not None:
            self._on_leave_step(leaving)
        target = leaving + 1
        if target not in self._visited:
            self._visited.append(target)
        self._set_current(target)
        return True

    def go_back(self) -> bool:
        if self._current_step <= FIRST_STEP:
            return False
        self._set_current(self._current_step - 1)
        return True

    def go_to_step(self, step: int) -> bool:
        if not self.can_navigate_to_step(step):
            logger.debug("Ignoring jump to unvisited step %s", step)
            return False
        if step == self._current_step:
            return False
        self._set_current(step)
        return True

    def restore(self, current_step: int, visited_steps: Iterable[int] | None = None) -> None:
        """Replace the navigation state, e.g. from a restored draft."""

        current = ensure_step(current_step)
        self._visited = normalize_visited_steps(list(visited_steps or []), current)
        self._current_step = current
        set_wizard_step(str(current))

    def reset(self) -> None:
        self.restore(FIRST_STEP, [FIRST_STEP])

    def _set_current(self, step: int) -> None:
        previous = self._current_step
        self._current_step = step
        set_wizard_step(str(step))
        logger.debug("Wizard step %s -> %s (visited=%s)", previous, step, self._visited)
        if self._on_change is not None:
            self._on_change(self.state)


__all__ = ["NavigationController", "NavigationState"]

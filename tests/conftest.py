import heapq
import itertools
from collections.abc import Callable
from typing import Any

import pytest

from cardreveal.models import failure as failure_module
from cardreveal.models.card_design import CardDesign, DesignType, GradientColors


@pytest.fixture(autouse=True)
def clear_finalized_responses():
    """Clear the finalized responses set between tests.

    Python reuses memory addresses for new objects, so id() values from a
    previous test could collide with responses created in this one.
    """
    failure_module._finalized_responses.clear()
    yield
    failure_module._finalized_responses.clear()


class ManualHandle:
    """Handle returned by ManualScheduler.call_later."""

    def __init__(self, when: float, callback: Callable[[], Any]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler: timers only run when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> None:
        """Run every timer due within the next `seconds`, in order."""
        target = self.now + seconds + 1e-9
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if not handle.cancelled:
                handle.callback()
        self.now = max(self.now, target)

    def run_all(self, limit: float = 60.0) -> None:
        self.advance(limit)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def sample_catalog() -> list[CardDesign]:
    """Fully populated catalog as cached on the client."""
    return [
        CardDesign(
            id="a",
            name="Amber",
            design_type=DesignType.SOLID,
            solid_color="#f66633",
        ),
        CardDesign(
            id="b",
            name="Ocean",
            design_type=DesignType.GRADIENT,
            gradient_colors=GradientColors(primary="#3a878c", secondary="#1d4e89"),
        ),
        CardDesign(
            id="c",
            name="Forest",
            design_type=DesignType.IMAGE,
            image_url="/uploads/forest.png",
        ),
    ]

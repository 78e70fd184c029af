"""
Reveal Animation Controller: Timed Spin-and-Reveal State Machine.

Drives the "spin through candidates" animation over a ResolvedPool and
always lands on the awarded card.

PHASES:
    IDLE → FAST_SPIN → SLOW_SPIN → REVEALED → (completion) → CLOSED
    IDLE → REVEALED → (completion) → CLOSED        one-card pools

INVARIANTS:
- The reveal starts at most once per session
- Ticks advance the displayed index by exactly one (mod pool size)
- REVEALED always displays awarded_index; whatever the spin landed on is discarded
- Completion fires at most once per session, never after close()
- Every timer belongs to one session; a timer whose session token is no
  longer current is dropped when it fires

Scheduling is single-threaded and cooperative: any object with
`call_later(delay, callback)` returning a cancellable handle will do
(an asyncio event loop is the default).
"""

import asyncio
import itertools
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from cardreveal.models.resolved_pool import ResolvedPool
from cardreveal.models.reveal_state import RevealPhase, RevealState, RevealTiming

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> Cancellable: ...


StateListener = Callable[[RevealState], None]
CompletionListener = Callable[[int], None]


class _Timer:
    """One-shot timer owned by a reveal session."""

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[[], None]) -> None:
        self.cancelled = False
        self._scheduler = scheduler
        self._callback = callback
        self._handle = scheduler.call_later(delay, self._fire)

    def _fire(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._callback()

    def cancel(self) -> None:
        self.cancelled = True
        self._handle.cancel()


class _PeriodicTimer(_Timer):
    """Fixed-period timer, re-armed before each tick runs."""

    def __init__(self, scheduler: Scheduler, period: float, callback: Callable[[], None]) -> None:
        self._period = period
        super().__init__(scheduler, period, callback)

    def _fire(self) -> None:
        if self.cancelled:
            return
        self._handle = self._scheduler.call_later(self._period, self._fire)
        self._callback()


@dataclass(eq=False)
class _Session:
    """Mutable state of one open/close cycle."""

    token: int
    phase: RevealPhase = RevealPhase.IDLE
    displayed_index: int = 0
    pool: ResolvedPool | None = None
    started: bool = False
    completed: bool = False
    timers: set[_Timer] = field(default_factory=set)

    def snapshot(self) -> RevealState:
        return RevealState(
            session_token=self.token,
            phase=self.phase,
            displayed_index=self.displayed_index,
            completed=self.completed,
        )


class RevealController:
    """
    Runs reveal sessions over resolved pools.

    Usage:
        controller = RevealController(on_state=render, on_complete=refresh)
        controller.open(pool)      # UI opened
        ...
        controller.close()         # UI dismissed (cancels any pending work)
    """

    # Shared across controllers; tokens are never reused
    _session_tokens = itertools.count(1)

    def __init__(
        self,
        timing: RevealTiming | None = None,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
        on_state: StateListener | None = None,
        on_complete: CompletionListener | None = None,
    ) -> None:
        self.timing = timing or RevealTiming.from_settings()
        self._scheduler = scheduler
        self._rng = rng or random.Random()
        self._on_state = on_state
        self._on_complete = on_complete
        self._session: _Session | None = None
        self._last_state: RevealState | None = None

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @property
    def scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = asyncio.get_running_loop()
        return self._scheduler

    @property
    def is_open(self) -> bool:
        return self._session is not None

    @property
    def session_token(self) -> int | None:
        return self._session.token if self._session else None

    @property
    def state(self) -> RevealState | None:
        """Last state emitted (CLOSED after close())."""
        return self._last_state

    @property
    def live_timer_count(self) -> int:
        return len(self._session.timers) if self._session else 0

    def open(self, pool: ResolvedPool | None = None) -> int:
        """
        Start a new session, tearing down any session still open.

        The previous session's timers are cancelled before anything new is
        armed. Returns the new session token.
        """
        previous = self._session
        self._teardown()
        if previous is not None:
            logger.info("reveal_session_replaced", extra={"session_token": previous.token})

        session = _Session(token=next(self._session_tokens))
        self._session = session
        self._emit(session)

        if pool is not None and self._session is session:
            self.supply(pool)
        return session.token

    def supply(self, pool: ResolvedPool | None) -> None:
        """
        Provide the resolved pool to the open session.

        Safe to call repeatedly: the reveal starts once per session. An
        empty or missing pool leaves the session idle.
        """
        session = self._session
        if session is None:
            logger.debug("reveal_supply_without_session")
            return
        if session.started or pool is None or len(pool) == 0:
            return

        session.started = True
        session.pool = pool
        logger.info(
            "reveal_started",
            extra={
                "session_token": session.token,
                "pool_size": len(pool),
                "awarded_index": pool.awarded_index,
            },
        )

        if pool.is_single:
            self._reveal(session, self.timing.single_complete_delay)
        else:
            self._start_fast_spin(session, pool)

    def close(self) -> None:
        """
        Close the hosting UI.

        Cancels every pending timer of the current session. Idempotent.
        No completion fires for a session closed before it completed.
        """
        session = self._session
        if session is None:
            return
        self._teardown()
        session.phase = RevealPhase.CLOSED
        logger.info(
            "reveal_session_closed",
            extra={"session_token": session.token, "completed": session.completed},
        )
        self._emit(session)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def _start_fast_spin(self, session: _Session, pool: ResolvedPool) -> None:
        size = len(pool)
        start = self._rng.randrange(size)
        if start == pool.awarded_index:
            start = (start + 1) % size

        session.phase = RevealPhase.FAST_SPIN
        session.displayed_index = start
        self._emit(session)
        if self._session is not session:
            return

        fast = self._arm(session, self.timing.fast_tick, self._advance, periodic=True)
        self._arm(
            session,
            self.timing.fast_duration,
            lambda s: self._start_slow_spin(s, fast),
        )

    def _start_slow_spin(self, session: _Session, fast: _Timer) -> None:
        self._disarm(session, fast)
        session.phase = RevealPhase.SLOW_SPIN
        self._emit(session)
        if self._session is not session:
            return

        slow = self._arm(session, self.timing.slow_tick, self._advance, periodic=True)
        self._arm(
            session,
            self.timing.slow_duration,
            lambda s: self._snap_to_awarded(s, slow),
        )

    def _snap_to_awarded(self, session: _Session, slow: _Timer) -> None:
        self._disarm(session, slow)
        self._reveal(session, self.timing.complete_delay)

    def _reveal(self, session: _Session, complete_delay: float) -> None:
        if session.pool is None:
            return
        session.phase = RevealPhase.REVEALED
        session.displayed_index = session.pool.awarded_index
        self._emit(session)
        if self._session is not session:
            return
        self._arm(session, complete_delay, self._complete)

    def _advance(self, session: _Session) -> None:
        if session.pool is None:
            return
        session.displayed_index = (session.displayed_index + 1) % len(session.pool)
        self._emit(session)

    def _complete(self, session: _Session) -> None:
        if session.completed:
            return
        session.completed = True
        logger.info("reveal_completed", extra={"session_token": session.token})
        self._emit(session)
        if self._on_complete is not None:
            self._on_complete(session.token)

    # =========================================================================
    # TIMER BOOKKEEPING
    # =========================================================================

    def _arm(
        self,
        session: _Session,
        delay: float,
        action: Callable[[_Session], None],
        periodic: bool = False,
    ) -> _Timer:
        """Schedule `action` for `session`, guarded by the session token."""
        token = session.token

        def fire() -> None:
            if self._session is None or self._session.token != token:
                logger.debug("stale_reveal_timer_dropped", extra={"session_token": token})
                timer.cancel()
                return
            if not periodic:
                session.timers.discard(timer)
            action(session)

        timer_cls = _PeriodicTimer if periodic else _Timer
        timer = timer_cls(self.scheduler, delay, fire)
        session.timers.add(timer)
        return timer

    def _disarm(self, session: _Session, timer: _Timer) -> None:
        timer.cancel()
        session.timers.discard(timer)

    def _teardown(self) -> None:
        session = self._session
        if session is None:
            return
        for timer in list(session.timers):
            timer.cancel()
        session.timers.clear()
        self._session = None

    def _emit(self, session: _Session) -> None:
        state = session.snapshot()
        self._last_state = state
        if self._on_state is not None:
            self._on_state(state)

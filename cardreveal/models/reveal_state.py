"""
Reveal state models.

Snapshots emitted by the reveal controller to the rendering layer, plus
the timing configuration that drives the animation phases.
"""

from dataclasses import dataclass, fields
from enum import Enum

from cardreveal.config import settings


class RevealPhase(str, Enum):
    """Phases of a reveal session."""

    IDLE = "idle"
    FAST_SPIN = "fast_spin"
    SLOW_SPIN = "slow_spin"
    REVEALED = "revealed"
    CLOSED = "closed"


SPINNING_PHASES = frozenset({RevealPhase.FAST_SPIN, RevealPhase.SLOW_SPIN})


@dataclass(frozen=True, slots=True)
class RevealState:
    """
    What the rendering layer should show right now.

    Attributes:
        session_token: Session this snapshot belongs to
        phase: Current phase
        displayed_index: Index into the resolved pool currently on screen
        completed: True once the completion signal has fired
    """

    session_token: int
    phase: RevealPhase
    displayed_index: int = 0
    completed: bool = False

    @property
    def is_animating(self) -> bool:
        return self.phase in SPINNING_PHASES

    @property
    def is_revealed(self) -> bool:
        return self.phase is RevealPhase.REVEALED


@dataclass(frozen=True, slots=True)
class RevealTiming:
    """
    Phase timing, in seconds.

    Attributes:
        fast_tick: Period of the fast spin
        fast_duration: How long the fast spin lasts
        slow_tick: Period of the slow spin
        slow_duration: How long the slow spin lasts
        complete_delay: Revealed -> completion delay after a spin
        single_complete_delay: Revealed -> completion delay for a one-card pool
    """

    fast_tick: float = 0.1
    fast_duration: float = 2.0
    slow_tick: float = 0.2
    slow_duration: float = 1.0
    complete_delay: float = 1.0
    single_complete_delay: float = 0.5

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) <= 0:
                raise ValueError(f"{f.name} must be positive")

    @classmethod
    def from_settings(cls) -> "RevealTiming":
        return cls(
            fast_tick=settings.reveal_fast_tick_ms / 1000,
            fast_duration=settings.reveal_fast_duration_ms / 1000,
            slow_tick=settings.reveal_slow_tick_ms / 1000,
            slow_duration=settings.reveal_slow_duration_ms / 1000,
            complete_delay=settings.reveal_complete_delay_ms / 1000,
            single_complete_delay=settings.reveal_single_complete_delay_ms / 1000,
        )

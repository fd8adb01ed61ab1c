# wave_animation.py
"""
Drives the phase of a wave surface over time.

The animation behaviour is a closed set of three variants:

    Continuous(duration)              phase += 2*pi every `duration`, repeats
    BackAndForth(duration, distance)  phase sweeps 2*pi*max(2, 2*distance)
                                      and reverses every `duration`
    NoAnimation()                     phase stays where it started

Every function here dispatches over all three and rejects anything else.
"""
import logging
import math
import time
import numpy as np
from typing import Any, Callable, Dict, NamedTuple, Optional, Union

from geometry import Rect
from wave_surface import WaveParameters, generate_surface

# --- Data Contracts ---
#
# phase_at(behaviour, start_phase: float, elapsed: float) -> float:
#   - Invariants:
#     - NoAnimation, or a duration <= 0, always yields start_phase.
#     - Continuous is linear in elapsed within a cycle and jumps back to
#       start_phase at every multiple of duration.
#     - BackAndForth is linear, reaches start_phase + end_phase at odd
#       multiples of duration and start_phase at even multiples.
#
# class WaveAnimator:
#   - surface(self, rect: Rect, now: Optional[float] = None) -> np.ndarray:
#     - Outputs: generate_surface(rect, params with the phase for `now`).


class Continuous(NamedTuple):
    duration: float


class BackAndForth(NamedTuple):
    duration: float
    distance: int = 2


class NoAnimation(NamedTuple):
    pass


AnimationBehaviour = Union[Continuous, BackAndForth, NoAnimation]


def end_phase(behaviour: AnimationBehaviour) -> float:
    """Phase offset reached at the end of one animation cycle."""
    if isinstance(behaviour, Continuous):
        return 2 * math.pi
    if isinstance(behaviour, BackAndForth):
        return 2 * math.pi * max(2, 2 * behaviour.distance)
    if isinstance(behaviour, NoAnimation):
        return 0.0
    raise TypeError(f"Unknown animation behaviour: {behaviour!r}")


def phase_at(behaviour: AnimationBehaviour, start_phase: float, elapsed: float) -> float:
    """Phase of a wave `elapsed` seconds after its animation started."""
    if isinstance(behaviour, NoAnimation):
        return start_phase
    if not isinstance(behaviour, (Continuous, BackAndForth)):
        raise TypeError(f"Unknown animation behaviour: {behaviour!r}")
    if behaviour.duration <= 0:
        return start_phase

    cycles = max(elapsed, 0.0) / behaviour.duration
    completed = math.floor(cycles)
    fraction = cycles - completed
    if isinstance(behaviour, BackAndForth) and completed % 2 == 1:
        fraction = 1.0 - fraction
    return start_phase + end_phase(behaviour) * fraction


def slower(behaviour: AnimationBehaviour, extra: float = 0.5) -> AnimationBehaviour:
    """Same behaviour with a longer cycle, used for background layers."""
    if isinstance(behaviour, Continuous):
        return Continuous(behaviour.duration + extra)
    if isinstance(behaviour, BackAndForth):
        return BackAndForth(behaviour.duration + extra, behaviour.distance)
    if isinstance(behaviour, NoAnimation):
        return behaviour
    raise TypeError(f"Unknown animation behaviour: {behaviour!r}")


def behaviour_from_config(config: Dict[str, Any]) -> AnimationBehaviour:
    """
    Reads an animation behaviour from a config entry such as
    {"type": "backAndForth", "duration": 2.5, "distance": 2}.
    """
    kind = config.get('type', 'none')
    if kind == 'continuous':
        return Continuous(float(config.get('duration', 1.0)))
    if kind == 'backAndForth':
        return BackAndForth(float(config.get('duration', 2.5)), int(config.get('distance', 2)))
    if kind == 'none':
        return NoAnimation()
    msg = (
        f"Configuration error: unknown wave animation '{kind}'. "
        f"Expected 'continuous', 'backAndForth' or 'none'."
    )
    logging.critical(msg)
    raise ValueError(msg)


class WaveAnimator:
    """
    One animated wave layer: a parameter template plus a phase driver.
    """
    def __init__(
        self,
        params: WaveParameters,
        behaviour: AnimationBehaviour = BackAndForth(2.5),
        start_phase: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            params (WaveParameters): Shape of the wave; its phase is ignored.
            behaviour (AnimationBehaviour): How the phase moves over time.
            start_phase (float): Initial phase in multiples of pi.
            clock: Time source used when no explicit time is given.
        """
        end_phase(behaviour)  # rejects unknown behaviours early
        self.params = params
        self.behaviour = behaviour
        self.start_phase = start_phase * math.pi
        self._clock = clock
        self._start_time: Optional[float] = None

    @classmethod
    def from_config(
        cls, config: Dict[str, Any], clock: Callable[[], float] = time.monotonic
    ) -> "WaveAnimator":
        params = WaveParameters(
            amplitude=config.get('amplitude', 10.0),
            wavelength=config.get('wavelength', 0.25),
            water_level=config.get('water_level', 0.5),
            rotation=config.get('rotation', 0.0),
        )
        behaviour = behaviour_from_config(config.get('animation', {}))
        return cls(params, behaviour, config.get('start_phase', 1.0), clock)

    def start(self, now: Optional[float] = None) -> None:
        self._start_time = self._now(now)

    def set_behaviour(self, behaviour: AnimationBehaviour, now: Optional[float] = None) -> None:
        """Switches the phase driver and restarts it from the start phase."""
        end_phase(behaviour)
        self.behaviour = behaviour
        self.start(now)
        logging.debug(f"Wave animation changed to {behaviour!r}.")

    def update(self, **changes: float) -> None:
        """
        Replaces amplitude, wavelength, water_level and/or rotation.
        The new values are clamped like any other WaveParameters.
        """
        unknown = set(changes) - {'amplitude', 'wavelength', 'water_level', 'rotation'}
        if unknown:
            raise TypeError(f"Unknown wave parameters: {sorted(unknown)}")
        current = {
            'amplitude': self.params.amplitude,
            'wavelength': self.params.wavelength,
            'water_level': self.params.water_level,
            'rotation': self.params.rotation,
        }
        current.update(changes)
        self.params = WaveParameters(**current)

    def phase(self, now: Optional[float] = None) -> float:
        now = self._now(now)
        if self._start_time is None:
            self._start_time = now
        return phase_at(self.behaviour, self.start_phase, now - self._start_time)

    def surface(self, rect: Rect, now: Optional[float] = None) -> np.ndarray:
        return generate_surface(rect, self.params.with_phase(self.phase(now)))

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

# simulation.py
"""
Drives particles along their animation cycles.

This module defines the ParticleEngine class, which owns one particle's
lifecycle on an explicit timeline: it advances the phase sequence, applies
the edge policy whenever the particle reaches the boundary and reports
position updates at a bounded interval. ParticleField runs many engines
that share the same parameters.
"""
import logging
import math
import time
import numpy as np
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from animation import AnimationLeg, LegKind, plan_cycle, plan_position, replan
from constants import DEFAULT_UPDATE_INTERVAL, MAX_LEG_TRANSITIONS_PER_TICK
from geometry import Edge, Point, Rect, clamp_point, nearest_edge, validate_rect
from particle import EdgePolicy, ParticleState, scatter_positions
from vector_math import Vector2, bounce, from_angle, from_degrees

# --- Data Contracts ---
#
# class ParticleEngine:
#   - __init__(self, start_position, bounding_rect, vector, speed, edge_policy,
#              update_interval, on_position_changed, on_edge_hit, clock):
#     - Inputs:
#       - start_position: Point inside bounding_rect.
#       - bounding_rect: non-degenerate Rect (ValueError otherwise).
#       - vector: direction only; speed: units per second (>= 0).
#       - on_position_changed(point): called at most once per update_interval.
#       - on_edge_hit(point, edge): called once per completed END leg.
#       - clock: zero-argument callable returning seconds; used by setters.
#
#   - tick(self, now: Optional[float] = None) -> Optional[Point]:
#     - Side Effects: starts the timeline on first call, completes every leg
#       whose end lies before `now`, applies the edge policy, may emit a
#       position update.
#     - Outputs: current position, or None once stopped or vanished.
#     - Invariants: a static plan never advances; a vanished particle never
#       emits again.
#
#   - update(self, vector=None, speed=None, bounding_rect=None, now=None) -> None:
#     - Side Effects: applies all given changes, then replans once from the
#       current interpolated position.


class MotionState(Enum):
    """Leg the particle is travelling (named after its destination), or VANISHED."""
    START = "start"
    END = "end"
    RESPAWN = "respawn"
    VANISHED = "vanished"


class ParticleEngine:
    """
    Runs one particle's phase sequence on a timeline.
    """
    def __init__(
        self,
        start_position: Point,
        bounding_rect: Rect,
        vector: Vector2,
        speed: float,
        edge_policy: EdgePolicy = EdgePolicy.WRAP_AROUND,
        update_interval: float = DEFAULT_UPDATE_INTERVAL,
        on_position_changed: Optional[Callable[[Point], None]] = None,
        on_edge_hit: Optional[Callable[[Point, Edge], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.state = ParticleState(start_position, bounding_rect, vector, speed)
        self.edge_policy = edge_policy
        self.update_interval = update_interval
        self.on_position_changed = on_position_changed
        self.on_edge_hit = on_edge_hit
        self._clock = clock
        self._last_emit_time: Optional[float] = None
        self._last_position = self.state.start_position
        self._stopped = False

    # --- Read-only views ---

    @property
    def vector(self) -> Vector2:
        return self.state.vector

    @vector.setter
    def vector(self, value: Vector2) -> None:
        self.update(vector=value)

    @property
    def speed(self) -> float:
        return self.state.speed

    @speed.setter
    def speed(self, value: float) -> None:
        self.update(speed=value)

    @property
    def bounding_rect(self) -> Rect:
        return self.state.bounding_rect

    @bounding_rect.setter
    def bounding_rect(self, value: Rect) -> None:
        self.update(bounding_rect=value)

    @property
    def visible(self) -> bool:
        return self.state.visible

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def legs(self) -> List[AnimationLeg]:
        return self.state.legs

    @property
    def motion_state(self) -> MotionState:
        if not self.state.visible:
            return MotionState.VANISHED
        return MotionState(self.state.current_leg.kind.value)

    # --- Timeline ---

    def start(self, now: Optional[float] = None) -> None:
        """Records the start time of the first leg. Later calls are ignored."""
        if self.state.leg_start_time is None:
            self.state.leg_start_time = self._now(now)

    def stop(self) -> None:
        self._stopped = True

    def current_position(self, now: Optional[float] = None) -> Point:
        """
        Where the particle is at `now`.

        Legs that finished before `now` are completed first, so a host may
        poll this instead of tick(). Edge hits fire as usual, but no
        position update is emitted.
        """
        if self._stopped or not self.state.visible:
            return self._last_position
        now = self._now(now)
        if self.state.leg_start_time is not None:
            self._advance_to(now)
            if not self.state.visible:
                return self._last_position
        return plan_position(
            self.state.plan, self.state.current_leg_index, self.state.leg_start_time, now
        )

    def tick(self, now: Optional[float] = None) -> Optional[Point]:
        """
        Advances the particle to `now` and returns its position.
        """
        if self._stopped or not self.state.visible:
            return None
        now = self._now(now)
        self.start(now)
        self._advance_to(now)
        if not self.state.visible:
            return None

        position = self.current_position(now)
        self._last_position = position
        if self._last_emit_time is None or now - self._last_emit_time >= self.update_interval:
            self._last_emit_time = now
            if self.on_position_changed is not None:
                self.on_position_changed(position)
        return position

    # --- Parameter changes ---

    def update(
        self,
        vector: Optional[Vector2] = None,
        speed: Optional[float] = None,
        bounding_rect: Optional[Rect] = None,
        now: Optional[float] = None,
    ) -> None:
        """
        Applies new parameters and replans from the current position.

        All changes passed together produce a single replan, so the next tick
        never observes half of an update.
        """
        st = self.state
        new_vector = st.vector if vector is None else Vector2(*vector)
        new_speed = st.speed if speed is None else float(speed)
        new_rect = st.bounding_rect
        if bounding_rect is not None:
            validate_rect(bounding_rect)
            new_rect = Rect(*bounding_rect)

        if self._stopped or not st.visible:
            st.vector, st.speed, st.bounding_rect = new_vector, new_speed, new_rect
            return

        now = self._now(now)
        if st.leg_start_time is not None:
            # Bring the cycle up to date so the replan starts on the right leg.
            self._advance_to(now)
            if not st.visible:
                st.vector, st.speed, st.bounding_rect = new_vector, new_speed, new_rect
                return

        plan = replan(
            st.plan, st.current_leg_index, st.leg_start_time, now, new_rect, new_vector, new_speed
        )
        if new_rect != st.bounding_rect:
            # The particle may lie outside a shrunken rect; pull it back in.
            plan = plan_cycle(new_rect, clamp_point(new_rect, plan.start), new_vector, new_speed)

        st.vector, st.speed, st.bounding_rect = new_vector, new_speed, new_rect
        st.apply_plan(plan, None if st.leg_start_time is None else now)
        logging.debug(
            f"Replanned from ({plan.start.x:.2f}, {plan.start.y:.2f}) "
            f"with vector ({new_vector.dx:.3f}, {new_vector.dy:.3f}) and speed {new_speed:.2f}."
        )

    # --- Internals ---

    def _now(self, now: Optional[float]) -> float:
        return self._clock() if now is None else now

    def _advance_to(self, now: float) -> None:
        """Completes every leg that ended at or before `now`."""
        st = self.state
        if self.edge_policy is EdgePolicy.WRAP_AROUND and not st.plan.is_static:
            self._skip_whole_cycles(now)
        transitions = 0
        while st.visible and not st.plan.is_static:
            leg = st.current_leg
            if now - st.leg_start_time < leg.duration:
                break
            if transitions >= MAX_LEG_TRANSITIONS_PER_TICK:
                logging.warning(
                    f"Particle exceeded {MAX_LEG_TRANSITIONS_PER_TICK} leg transitions "
                    f"in one tick; resuming on the next tick."
                )
                break
            transitions += 1

            if leg.kind is LegKind.END:
                self._complete_boundary_leg(leg)
            else:
                st.advance()

    def _skip_whole_cycles(self, now: float) -> None:
        """
        Jumps over complete wrap-around cycles after a long pause.

        A wrapping plan never changes, so every skipped cycle ends with the
        same edge hit; the callback still fires once per cycle.
        """
        st = self.state
        cycle = st.plan.cycle_duration
        skipped = math.floor((now - st.leg_start_time) / cycle)
        if skipped < 1:
            return
        st.leg_start_time += cycle * skipped

        if self.on_edge_hit is not None:
            end_leg = next(leg for leg in st.plan.legs if leg.kind is LegKind.END)
            edge = nearest_edge(st.bounding_rect, end_leg.destination)
            for _ in range(skipped):
                self.on_edge_hit(end_leg.destination, edge)
        logging.debug(f"Skipped {skipped} whole cycles of {cycle:.2f}s.")

    def _complete_boundary_leg(self, leg: AnimationLeg) -> None:
        """Applies the edge policy at the point where an END leg finished."""
        st = self.state
        hit = leg.destination
        completed_at = st.leg_start_time + leg.duration
        if self.on_edge_hit is not None:
            self.on_edge_hit(hit, nearest_edge(st.bounding_rect, hit))

        if self.edge_policy is EdgePolicy.WRAP_AROUND:
            st.advance()
        elif self.edge_policy is EdgePolicy.BOUNCE_OFF:
            st.vector = bounce(st.vector, st.bounding_rect, hit)
            st.apply_plan(plan_cycle(st.bounding_rect, hit, st.vector, st.speed), completed_at)
        elif self.edge_policy is EdgePolicy.DISAPPEAR:
            st.visible = False
            self._last_position = hit
            logging.debug(f"Particle vanished at ({hit.x:.2f}, {hit.y:.2f}).")
        else:
            raise ValueError(f"Unhandled edge policy: {self.edge_policy}")


class ParticleField:
    """
    A group of particles scattered over one rect and sharing their motion
    parameters, e.g. sediment drifting in the same current.
    """
    def __init__(
        self,
        params: Dict[str, Any],
        bounding_rect: Rect,
        on_edge_hit: Optional[Callable[[Point, Edge], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Scatters the particles and creates one engine per particle.

        Args:
            params (Dict[str, Any]): The "particles" section of the config.
            bounding_rect (Rect): The area the particles travel in.
            on_edge_hit: Optional callback shared by all engines.
            clock: Time source passed on to every engine.
        """
        validate_rect(bounding_rect)
        self._clock = clock
        self.particle_count = int(params.get('count', 100))
        self.seed = params.get('seed', 0)
        self.random_direction = bool(params.get('random_direction', False))
        self.edge_policy = EdgePolicy.from_name(params.get('edge_policy', 'wrapAround'))
        speed = float(params.get('speed', 20.0))
        update_interval = float(params.get('update_interval', DEFAULT_UPDATE_INTERVAL))

        # All randomness is controlled by a single seed.
        self.rng = np.random.default_rng(self.seed)
        positions = scatter_positions(bounding_rect, self.particle_count, self.rng)

        if self.random_direction:
            angles = self.rng.uniform(0.0, 2 * math.pi, size=self.particle_count)
            vectors = [from_angle(float(angle)) for angle in angles]
        else:
            shared = from_degrees(float(params.get('angle_degrees', 0.0)))
            vectors = [shared] * self.particle_count

        self.engines = [
            ParticleEngine(
                Point(float(x), float(y)),
                bounding_rect,
                vectors[i],
                speed,
                edge_policy=self.edge_policy,
                update_interval=update_interval,
                on_edge_hit=on_edge_hit,
                clock=clock,
            )
            for i, (x, y) in enumerate(positions)
        ]

        logging.info(
            f"ParticleField initialized with {self.particle_count} particles, "
            f"edge policy '{self.edge_policy.value}', speed {speed:.1f}."
        )

    @property
    def visible_count(self) -> int:
        return sum(1 for engine in self.engines if engine.visible)

    def set_vector(self, vector: Vector2, now: Optional[float] = None) -> None:
        """Points every particle in the same direction, each replanning from where it is."""
        for engine in self.engines:
            engine.update(vector=vector, now=now)

    def set_speed(self, speed: float, now: Optional[float] = None) -> None:
        for engine in self.engines:
            engine.update(speed=speed, now=now)

    def set_bounding_rect(self, rect: Rect, now: Optional[float] = None) -> None:
        for engine in self.engines:
            engine.update(bounding_rect=rect, now=now)

    def set_edge_policy(self, policy: EdgePolicy) -> None:
        self.edge_policy = policy
        for engine in self.engines:
            engine.edge_policy = policy

    def tick(self, now: Optional[float] = None) -> np.ndarray:
        """
        Advances every particle and returns the visible positions.

        Returns:
            np.ndarray: float64 array of shape (M, 2), M = visible particles.
        """
        # One timestamp for the whole field keeps the particles in step.
        now = self._clock() if now is None else now
        positions = [engine.tick(now) for engine in self.engines]
        visible = [p for p in positions if p is not None]
        if not visible:
            return np.empty((0, 2), dtype=np.float64)
        return np.array(visible, dtype=np.float64)

    def stop(self) -> None:
        for engine in self.engines:
            engine.stop()

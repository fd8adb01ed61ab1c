# animation.py
"""
Phase-based animation planner.

Turns a start point and a direction vector into a repeating three-leg
trajectory across a bounding rect:

    END      start   -> end      traverse the rect along the vector
    RESPAWN  end     -> respawn  instant relocation (duration 0)
    START    respawn -> start    re-enter and return to the start point

Each leg is named after its destination. The vector only supplies a
direction; the scalar speed (units per second) sets the durations.
"""
import logging
from enum import Enum
from typing import List, NamedTuple, Optional

from geometry import Point, Rect, distance, intersect, position_at
from vector_math import Vector2, invert, is_zero

# --- Data Contracts ---
#
# plan_cycle(rect: Rect, start: Point, vector: Vector2, speed: float) -> AnimationPlan:
#   - Outputs: an AnimationPlan whose legs are [END, RESPAWN, START].
#   - Invariants:
#     - plan.end == intersect(rect, start, vector)
#     - plan.respawn == intersect(rect, start, invert(vector))
#     - legs[0].origin == start and legs[-1].destination == start
#     - every duration >= 0; the RESPAWN duration is exactly 0
#     - speed <= 0 or a zero vector gives all-zero durations (static plan)
#
# replan(...) -> AnimationPlan:
#   - Rebuilds the cycle from the position interpolated on the leg in
#     progress, so motion continues without a visible jump. Without a
#     recorded leg start time (or for a static plan) it rebuilds from the
#     plan's start point.


class LegKind(Enum):
    START = "start"
    END = "end"
    RESPAWN = "respawn"


class AnimationLeg(NamedTuple):
    origin: Point
    destination: Point
    duration: float
    kind: LegKind


class AnimationPlan(NamedTuple):
    start: Point
    end: Point
    respawn: Point
    legs: List[AnimationLeg]

    @property
    def is_static(self) -> bool:
        """True when no leg takes any time, i.e. the particle cannot move."""
        return all(leg.duration == 0 for leg in self.legs)

    @property
    def cycle_duration(self) -> float:
        return sum(leg.duration for leg in self.legs)


def _duration(length: float, speed: float) -> float:
    if speed <= 0:
        return 0.0
    return length / speed


def plan_cycle(rect: Rect, start: Point, vector: Vector2, speed: float) -> AnimationPlan:
    """Builds the END -> RESPAWN -> START cycle for one particle."""
    start = Point(*start)
    if is_zero(vector):
        # No direction: every point of the cycle is the start itself.
        end = respawn = start
    else:
        end = intersect(rect, start, vector)
        respawn = intersect(rect, start, invert(vector))

    legs = [
        AnimationLeg(start, end, _duration(distance(start, end), speed), LegKind.END),
        AnimationLeg(end, respawn, 0.0, LegKind.RESPAWN),
        AnimationLeg(respawn, start, _duration(distance(respawn, start), speed), LegKind.START),
    ]
    return AnimationPlan(start, end, respawn, legs)


def plan_position(
    plan: AnimationPlan, leg_index: int, leg_start_time: Optional[float], now: float
) -> Point:
    """
    Where a particle following `plan` is at time `now`.

    Before the timeline starts, and for a static plan, that is the plan's
    start point.
    """
    if leg_start_time is None or plan.is_static:
        return plan.start
    leg = plan.legs[leg_index]
    return position_at(leg.origin, leg.destination, now, leg_start_time, leg.duration)


def replan(
    plan: AnimationPlan,
    leg_index: int,
    leg_start_time: Optional[float],
    now: float,
    rect: Rect,
    vector: Vector2,
    speed: float,
) -> AnimationPlan:
    """
    Rebuilds the cycle from wherever the particle currently is.

    `leg_start_time` is None when the timeline has not started yet; the
    cycle is then rebuilt from the static start position of `plan`.
    """
    if leg_start_time is None:
        logging.debug("Replanning before the timeline started, using the static start position.")
    current = plan_position(plan, leg_index, leg_start_time, now)
    return plan_cycle(rect, current, vector, speed)

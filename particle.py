# particle.py
"""
Manages the state of a single drifting particle.

This module defines the ParticleState class, which holds everything that
changes while a particle travels its animation cycle (the plan, the leg in
progress and when it started), plus the edge policy enum and the seeded
scatter used to place many particles at once.
"""
import logging
import numpy as np
from enum import Enum
from typing import List, Optional

from animation import AnimationLeg, AnimationPlan, plan_cycle
from geometry import Point, Rect, validate_rect
from vector_math import Vector2

# --- Data Contracts ---
#
# class ParticleState:
#   - __init__(self, start_position: Point, bounding_rect: Rect, vector: Vector2, speed: float):
#     - Side Effects: validates the rect and plans the first cycle.
#     - Invariants:
#       - 0 <= current_leg_index < len(legs)
#       - leg_start_time is None until the timeline starts.
#       - start_position is the point the current plan was built from.
#
# scatter_positions(rect: Rect, count: int, rng: np.random.Generator) -> np.ndarray:
#   - Outputs: float64 array of shape (count, 2), uniform inside rect.


class EdgePolicy(Enum):
    """What happens when a particle reaches the boundary of its rect."""
    WRAP_AROUND = "wrapAround"
    BOUNCE_OFF = "bounceOff"
    DISAPPEAR = "disappear"

    @classmethod
    def from_name(cls, name: str) -> "EdgePolicy":
        """Accepts either the value ("bounceOff") or the member name ("BOUNCE_OFF")."""
        for policy in cls:
            if name in (policy.value, policy.name):
                return policy
        msg = (
            f"Configuration error: unknown edge policy '{name}'. "
            f"Expected one of {[policy.value for policy in cls]}."
        )
        logging.critical(msg)
        raise ValueError(msg)


class ParticleState:
    """
    Plain data for one particle between two ticks.
    """
    def __init__(self, start_position: Point, bounding_rect: Rect, vector: Vector2, speed: float):
        validate_rect(bounding_rect)
        self.bounding_rect = Rect(*bounding_rect)
        self.vector = Vector2(*vector)
        self.speed = float(speed)
        self.start_position = Point(*start_position)
        self.plan: AnimationPlan = plan_cycle(
            self.bounding_rect, self.start_position, self.vector, self.speed
        )
        self.current_leg_index = 0
        self.leg_start_time: Optional[float] = None
        self.visible = True

    @property
    def legs(self) -> List[AnimationLeg]:
        return self.plan.legs

    @property
    def current_leg(self) -> AnimationLeg:
        return self.plan.legs[self.current_leg_index]

    def apply_plan(self, plan: AnimationPlan, start_time: Optional[float]) -> None:
        """Replaces the cycle and restarts it at its first leg."""
        self.plan = plan
        self.start_position = plan.start
        self.current_leg_index = 0
        self.leg_start_time = start_time

    def advance(self) -> AnimationLeg:
        """Moves to the next leg of the cycle; the new leg starts where the old one ended."""
        finished = self.current_leg
        self.leg_start_time += finished.duration
        self.current_leg_index = (self.current_leg_index + 1) % len(self.plan.legs)
        return self.current_leg


def scatter_positions(rect: Rect, count: int, rng: np.random.Generator) -> np.ndarray:
    """
    Uniformly scatters `count` start positions inside `rect`.

    All randomness comes from the injected generator so that a seed fully
    determines the layout.
    """
    positions = rng.uniform(
        low=[rect.min_x, rect.min_y],
        high=[rect.max_x, rect.max_y],
        size=(count, 2)
    )
    logging.debug(f"Scattered {count} start positions, array shape {positions.shape}.")
    return positions

# vector_math.py
"""
Pure functions over a 2D direction vector.

A Vector2 only carries a direction (and optionally a length). Speed is kept
separate by the animation planner, so none of these functions assume a
unit vector.
"""
import math
from typing import NamedTuple, TYPE_CHECKING

from constants import EDGE_MARGIN

if TYPE_CHECKING:
    from geometry import Point, Rect

# --- Data Contracts ---
#
# class Vector2(NamedTuple):
#   - dx: float, dy: float
#   - Invariants: immutable; magnitude(v) >= 0. The zero vector is legal and
#     means "no motion".
#
# bounce(v: Vector2, rect: Rect, point: Point) -> Vector2:
#   - Outputs: v with dx flipped when point.x is within EDGE_MARGIN of
#     rect.min_x while dx < 0, or of rect.max_x while dx > 0, and dy flipped
#     likewise for y. Both may flip.


class Vector2(NamedTuple):
    dx: float
    dy: float


ZERO = Vector2(0.0, 0.0)


def from_angle(angle: float) -> Vector2:
    """Unit vector pointing at `angle` radians (0 = +x, pi/2 = +y)."""
    return Vector2(math.cos(angle), math.sin(angle))


def from_degrees(degrees: float) -> Vector2:
    return from_angle(math.radians(degrees))


def invert(v: Vector2) -> Vector2:
    return Vector2(-v.dx, -v.dy)


def scale(v: Vector2, factor: float) -> Vector2:
    return Vector2(v.dx * factor, v.dy * factor)


def magnitude(v: Vector2) -> float:
    return math.hypot(v.dx, v.dy)


def is_zero(v: Vector2) -> bool:
    return v.dx == 0 and v.dy == 0


def angle_of(v: Vector2) -> float:
    """
    Direction of `v` in radians, in (-pi, pi].

    The zero vector has no direction; callers must check `is_zero` first.
    """
    if is_zero(v):
        raise ValueError("The zero vector has no direction.")
    return math.atan2(v.dy, v.dx)


def bounce(v: Vector2, rect: "Rect", point: "Point") -> Vector2:
    """
    Reflects `v` off the edges of `rect` that `point` touches.

    A component only flips when `v` moves toward the touched edge, so a
    hit near a corner never turns the particle back into the other edge.
    At a corner approached head-on both components flip.
    """
    dx, dy = v
    if (dx < 0 and abs(point.x - rect.min_x) < EDGE_MARGIN) or \
            (dx > 0 and abs(point.x - rect.max_x) < EDGE_MARGIN):
        dx = -dx
    if (dy < 0 and abs(point.y - rect.min_y) < EDGE_MARGIN) or \
            (dy > 0 and abs(point.y - rect.max_y) < EDGE_MARGIN):
        dy = -dy
    return Vector2(dx, dy)

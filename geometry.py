# geometry.py
"""
Geometry helpers for the motion engine.

Ray/rectangle intersection, distances and time-based linear interpolation
between two points. Coordinates follow screen conventions: x grows to the
right and y grows downward, so `min_y` is the top edge.
"""
import logging
import math
from enum import Enum
from typing import NamedTuple

import numpy as np

from vector_math import Vector2

# --- Data Contracts ---
#
# intersect(rect: Rect, origin: Point, direction: Vector2) -> Point:
#   - Outputs: the first point where the ray leaves `rect`, checking only
#     the sides the ray moves toward.
#   - Invariants: returns `origin` unchanged when no side qualifies (zero
#     vector, or origin outside and moving away). Callers treat that as
#     "no travel".
#
# position_at(origin, destination, now, start_time, duration) -> Point:
#   - Invariants: never overshoots `destination`; duration 0 yields the
#     destination.


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_size(cls, x: float, y: float, width: float, height: float) -> "Rect":
        rect = cls(x, y, x + width, y + height)
        validate_rect(rect)
        return rect

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


class Edge(Enum):
    """The four sides of a rect. Declaration order breaks distance ties."""
    TOP = "top"
    BOTTOM = "bottom"
    LEADING = "leading"
    TRAILING = "trailing"


def validate_rect(rect: Rect) -> None:
    """Raises ValueError for a rect with no area."""
    if not (rect.max_x > rect.min_x and rect.max_y > rect.min_y):
        msg = (
            f"Configuration error: bounding rect {tuple(rect)} is degenerate. "
            f"max_x must exceed min_x and max_y must exceed min_y."
        )
        logging.critical(msg)
        raise ValueError(msg)


def intersect(rect: Rect, origin: Point, direction: Vector2) -> Point:
    """
    Casts a ray from `origin` along `direction` and returns the first point
    where it crosses the boundary of `rect`.
    """
    ox, oy = origin
    dx, dy = direction
    t_candidates = []

    # Only the side the ray is moving toward can be hit on each axis.
    if dx > 0:
        t = (rect.max_x - ox) / dx
        y_at = oy + t * dy
        if t > 0 and rect.min_y <= y_at <= rect.max_y:
            t_candidates.append(t)
    elif dx < 0:
        t = (rect.min_x - ox) / dx
        y_at = oy + t * dy
        if t > 0 and rect.min_y <= y_at <= rect.max_y:
            t_candidates.append(t)

    if dy > 0:
        t = (rect.max_y - oy) / dy
        x_at = ox + t * dx
        if t > 0 and rect.min_x <= x_at <= rect.max_x:
            t_candidates.append(t)
    elif dy < 0:
        t = (rect.min_y - oy) / dy
        x_at = ox + t * dx
        if t > 0 and rect.min_x <= x_at <= rect.max_x:
            t_candidates.append(t)

    if not t_candidates:
        return Point(ox, oy)

    t = min(t_candidates)
    return Point(ox + t * dx, oy + t * dy)


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def interpolate(origin: Point, destination: Point, fraction: float) -> Point:
    """Linear interpolation, clamped so it never overshoots either end."""
    if fraction >= 1:
        return Point(destination.x, destination.y)
    if fraction <= 0:
        return Point(origin.x, origin.y)
    return Point(
        origin.x + (destination.x - origin.x) * fraction,
        origin.y + (destination.y - origin.y) * fraction,
    )


def position_at(
    origin: Point, destination: Point, now: float, start_time: float, duration: float
) -> Point:
    """Position at time `now` on a leg that started at `start_time`."""
    if duration <= 0:
        return Point(destination.x, destination.y)
    return interpolate(origin, destination, (now - start_time) / duration)


def nearest_edge(rect: Rect, point: Point) -> Edge:
    """The side of `rect` closest to `point`."""
    distances = {
        Edge.TOP: abs(point.y - rect.min_y),
        Edge.BOTTOM: abs(point.y - rect.max_y),
        Edge.LEADING: abs(point.x - rect.min_x),
        Edge.TRAILING: abs(point.x - rect.max_x),
    }
    # min() keeps the first of equal values, i.e. declaration order.
    return min(Edge, key=lambda edge: distances[edge])


def clamp_point(rect: Rect, point: Point) -> Point:
    return Point(
        min(max(point.x, rect.min_x), rect.max_x),
        min(max(point.y, rect.min_y), rect.max_y),
    )


def polygon_area(points: np.ndarray) -> float:
    """Shoelace area of an implicitly closed polygon of shape (N, 2)."""
    if len(points) < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)

# wave_surface.py
"""
Generates the filled outline of an oscillating water surface.

The surface is a sine curve described by amplitude, wavelength, water
level, phase and rotation. The curve is sampled over a domain wider than
the viewport, rotated, moved to the water level, closed into a filled
region below the curve and finally clipped to the viewport.
"""
import math
import numpy as np
from numba import jit

from constants import WAVE_MAX_ROTATION, WAVE_MIN_WAVELENGTH, WAVE_SAMPLE_STEP
from geometry import Rect, validate_rect

# --- Data Contracts ---
#
# class WaveParameters:
#   - __init__(self, amplitude, wavelength, water_level=0.5, rotation=0.0, phase=0.0):
#     - Invariants (after clamping):
#       - amplitude >= 0
#       - wavelength >= WAVE_MIN_WAVELENGTH; one sine period spans
#         wavelength * rect.width units.
#       - -pi/4 <= rotation <= pi/4
#       - water_level is kept as given; 0 means dry, 1 means full.
#
# generate_surface(rect: Rect, params: WaveParameters) -> np.ndarray:
#   - Outputs: float64 array of shape (N, 2), an implicitly closed polygon
#     lying inside rect. N may be 0 when nothing is under water.
#   - Invariants: amplitude 0 gives a flat water line at the water level;
#     water_level 1 covers the whole rect, water_level 0 covers none of it,
#     for any amplitude and rotation.


class WaveParameters:
    """
    Shape of one water surface. Phase is the only field meant to change
    continuously; the others follow user input.
    """
    def __init__(
        self,
        amplitude: float,
        wavelength: float,
        water_level: float = 0.5,
        rotation: float = 0.0,
        phase: float = 0.0,
    ):
        self.amplitude = max(float(amplitude), 0.0)
        self.wavelength = max(float(wavelength), WAVE_MIN_WAVELENGTH)
        self.water_level = float(water_level)
        self.rotation = min(max(float(rotation), -WAVE_MAX_ROTATION), WAVE_MAX_ROTATION)
        self.phase = float(phase)

    def with_phase(self, phase: float) -> "WaveParameters":
        return WaveParameters(self.amplitude, self.wavelength, self.water_level, self.rotation, phase)

    def __repr__(self) -> str:
        return (
            f"WaveParameters(amplitude={self.amplitude}, wavelength={self.wavelength}, "
            f"water_level={self.water_level}, rotation={self.rotation}, phase={self.phase})"
        )


@jit(nopython=True)
def _sample_surface_numba(
    start_x, span, step, amplitude, period, phase, phase_origin,
    cos_r, sin_r, anchor_x, anchor_y
):
    """
    Numba-jitted sampling of the rotated surface curve.

    Samples are taken every `step` units from `start_x` to `start_x + span`
    (both included) in coordinates relative to the anchor, rotated about the
    anchor and then moved to (anchor_x, anchor_y).
    """
    count = int(math.ceil(span / step)) + 1
    points = np.empty((count, 2), dtype=np.float64)
    for i in range(count):
        offset = min(i * step, span)
        x = start_x + offset
        y = amplitude * math.sin(2.0 * math.pi * (x - phase_origin) / period + phase)
        points[i, 0] = anchor_x + x * cos_r - y * sin_r
        points[i, 1] = anchor_y + x * sin_r + y * cos_r
    return points


@jit(nopython=True)
def _clip_half_plane_numba(points, axis, bound, keep_below):
    """
    Numba-jitted Sutherland-Hodgman step against one axis-aligned half plane.

    Keeps the part of the polygon where points[:, axis] <= bound (keep_below)
    or >= bound. Crossing points are snapped exactly onto the bound.
    """
    n = points.shape[0]
    out = np.empty((2 * n, 2), dtype=np.float64)
    count = 0
    for i in range(n):
        cur = points[i]
        prev = points[i - 1]
        if keep_below:
            cur_in = cur[axis] <= bound
            prev_in = prev[axis] <= bound
        else:
            cur_in = cur[axis] >= bound
            prev_in = prev[axis] >= bound

        if cur_in != prev_in:
            t = (bound - prev[axis]) / (cur[axis] - prev[axis])
            out[count, 0] = prev[0] + t * (cur[0] - prev[0])
            out[count, 1] = prev[1] + t * (cur[1] - prev[1])
            out[count, axis] = bound
            count += 1
        if cur_in:
            out[count, 0] = cur[0]
            out[count, 1] = cur[1]
            count += 1
    return out[:count]


def clip_to_rect(points: np.ndarray, rect: Rect) -> np.ndarray:
    """Clips an implicitly closed polygon of shape (N, 2) to `rect`."""
    clipped = np.ascontiguousarray(points, dtype=np.float64)
    for axis, bound, keep_below in (
        (0, rect.min_x, False),
        (0, rect.max_x, True),
        (1, rect.min_y, False),
        (1, rect.max_y, True),
    ):
        if clipped.shape[0] == 0:
            break
        clipped = _clip_half_plane_numba(clipped, axis, float(bound), keep_below)
    return clipped


def water_line_y(rect: Rect, params: WaveParameters) -> float:
    """
    Vertical position of the mean water line at the rect's horizontal center.

    The sweep accounts for the amplitude and the tilt of the line so that
    the two ends of the water level range fully cover or fully uncover the
    rect.
    """
    cos_r = math.cos(params.rotation)
    crest = params.amplitude / cos_r
    tilt = (rect.width / 2) * math.tan(abs(params.rotation))
    sweep = rect.height + 2 * crest + 2 * tilt
    return rect.min_y - crest - tilt + sweep * (1 - params.water_level)


def generate_surface(rect: Rect, params: WaveParameters) -> np.ndarray:
    """
    Builds the filled water region of `rect` for the given wave parameters.

    Args:
        rect (Rect): The viewport.
        params (WaveParameters): Clamped wave description.

    Returns:
        np.ndarray: Implicitly closed polygon, float64, shape (N, 2).
    """
    validate_rect(rect)
    width = rect.width
    half_width = width / 2
    cos_r = math.cos(params.rotation)
    sin_r = math.sin(params.rotation)

    # A rotated line needs to be longer to still span the full width.
    elongation = (width / cos_r - width) + params.amplitude
    start_x = -half_width - elongation
    span = width + 2 * elongation

    anchor_x = rect.center.x
    anchor_y = water_line_y(rect, params)

    surface = _sample_surface_numba(
        start_x, span, WAVE_SAMPLE_STEP,
        params.amplitude, params.wavelength * width, params.phase, -half_width,
        cos_r, sin_r, anchor_x, anchor_y
    )

    # Close the region below the curve with two vertices under the rect.
    floor_y = max(rect.max_y, float(surface[:, 1].max())) + 1.0
    closing = np.array(
        [[surface[-1, 0], floor_y], [surface[0, 0], floor_y]], dtype=np.float64
    )
    polygon = np.vstack((surface, closing))

    return clip_to_rect(polygon, rect)

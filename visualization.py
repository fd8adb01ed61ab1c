# visualization.py
"""
Paints particles and wave surfaces using Pygame.

The visualizer is a pure consumer: each frame it receives the positions
and closed paths computed by the motion engine and draws them. It never
feeds geometry back into the engine.
"""
import logging
import pygame
import numpy as np
from typing import Any, Dict, Optional, Sequence

from constants import (
    BACKGROUND_COLOR, DEFAULT_PARTICLE_RADIUS, DEFAULT_WINDOW_SIZE, FPS, FULLSCREEN,
    MOTION_BLUR_ALPHA, OCEAN_COLORS, PARTICLE_COLOR, WAVE_BACKGROUND_ALPHA
)
from geometry import Rect

# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, viewer_params: Optional[Dict[str, Any]] = None, wave_layers: int = 0):
#     - Inputs:
#       - viewer_params: the "viewer" section of config.json ("fullscreen",
#         "window_size", "wave_colors", "particle_color").
#       - wave_layers: number of wave paths passed to draw() each frame.
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - draw(self, particle_positions: np.ndarray, wave_paths: Sequence[np.ndarray]) -> bool:
#     - Inputs:
#       - particle_positions: float array of shape (N, 2).
#       - wave_paths: closed polygons of shape (M, 2), back to front.
#     - Outputs:
#       - bool: False if the user has quit, True otherwise.


def _to_color(value) -> pygame.Color:
    """Builds a Color from a JSON list such as [0, 64, 128], a tuple or a color name."""
    if isinstance(value, (list, tuple)):
        return pygame.Color(*value)
    return pygame.Color(value)


class Visualizer:
    """
    Renders the motion engine's output into a Pygame window.
    """
    def __init__(self, viewer_params: Optional[Dict[str, Any]] = None, wave_layers: int = 0):
        """
        Initializes Pygame and the display window.
        """
        params = viewer_params if viewer_params is not None else {}
        pygame.init()

        if params.get('fullscreen', FULLSCREEN):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = params.get('window_size', DEFAULT_WINDOW_SIZE)
            self.screen = pygame.display.set_mode((width, height))

        self.width = width
        self.height = height
        self.viewport = Rect.from_size(0.0, 0.0, float(width), float(height))

        # Persistent scene surface. The blur surface is blitted over it every
        # frame, fading the previous frame into a trail.
        self.scene_surface = pygame.Surface((width, height))
        self.scene_surface.fill(BACKGROUND_COLOR)
        self.blur_surface = pygame.Surface((width, height), pygame.SRCALPHA)
        self.blur_surface.fill((*BACKGROUND_COLOR, MOTION_BLUR_ALPHA))
        # Scratch surface for translucent wave layers.
        self.wave_layer_surface = pygame.Surface((width, height), pygame.SRCALPHA)

        pygame.display.set_caption("Drifting Particles & Waves")
        self.clock = pygame.time.Clock()

        self.wave_colors = self._initialize_colors(wave_layers, params.get('wave_colors'))
        self.particle_color = _to_color(params.get('particle_color', PARTICLE_COLOR))

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def _initialize_colors(self, layers: int, config_colors: Optional[list]) -> list:
        """Loads one color per wave layer from config, falling back to the ocean palette."""
        def get_default_colors(n_layers):
            return [pygame.Color(OCEAN_COLORS[i % len(OCEAN_COLORS)]) for i in range(n_layers)]

        if not config_colors:
            logging.info("No wave colors found in config. Using the ocean palette.")
            return get_default_colors(layers)

        final_colors = []
        try:
            for rgb in config_colors:
                final_colors.append(_to_color(rgb))
        except (ValueError, TypeError) as e:
            logging.error(f"Could not parse wave colors from config: {e}. Falling back to the ocean palette.")
            return get_default_colors(layers)

        if len(final_colors) < layers:
            logging.warning(
                f"Config provides {len(final_colors)} wave colors, but {layers} are needed. "
                f"Filling the rest from the ocean palette."
            )
            final_colors.extend(get_default_colors(layers)[len(final_colors):])
        return final_colors[:layers]

    def _draw_waves(self, wave_paths: Sequence[np.ndarray]) -> None:
        """Draws wave layers back to front; all but the front layer are translucent."""
        last = len(wave_paths) - 1
        for i, path in enumerate(wave_paths):
            if len(path) < 3:
                continue
            points = [(float(x), float(y)) for x, y in path]
            color = self.wave_colors[i % len(self.wave_colors)] if self.wave_colors else pygame.Color(OCEAN_COLORS[0])
            if i == last:
                pygame.draw.polygon(self.scene_surface, color, points)
            else:
                self.wave_layer_surface.fill((0, 0, 0, 0))
                pygame.draw.polygon(
                    self.wave_layer_surface, (color.r, color.g, color.b, WAVE_BACKGROUND_ALPHA), points
                )
                self.scene_surface.blit(self.wave_layer_surface, (0, 0))

    def draw(self, particle_positions: np.ndarray, wave_paths: Sequence[np.ndarray] = ()) -> bool:
        """
        Draws one frame and handles events.

        Returns:
            bool: False if the loop should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return False

        self.scene_surface.blit(self.blur_surface, (0, 0))
        self._draw_waves(wave_paths)

        for x, y in particle_positions:
            pygame.draw.circle(
                self.scene_surface,
                self.particle_color,
                (int(x), int(y)),
                DEFAULT_PARTICLE_RADIUS
            )

        self.screen.blit(self.scene_surface, (0, 0))
        pygame.display.flip()
        self.clock.tick(FPS)
        return True

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()

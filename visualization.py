# visualization.py
"""
Handles drawing and window/input plumbing using Pygame.

Drawing is immediate mode: each frame starts with a compositing pass over
the previous frame (feedback zoom, fading trail, or a hard clear), then every
particle paints one filled shape translated to its position and rotated by
its shape angle.
"""
import logging
import math
import pygame
from typing import Callable, Dict, Optional, Sequence, Tuple

from constants import (
    FULLSCREEN, WINDOW_WIDTH, WINDOW_HEIGHT, BACKGROUND_COLOR, COMPOSITE_MODE,
    COMPOSITE_MODES, FEEDBACK_ROTATION, FEEDBACK_ZOOM, TRAIL_ALPHA,
    TRIANGLE_RATIO, MOUSE_ID
)
from context import FrameContext
from errors import SurfaceUnavailableError
from oscillator import Shape
from utils import clamp

# --- Data Contracts ---
#
# draw_particle(surface, shape, x, y, size, angle, color) -> None:
#   - Side Effects: Paints one filled shape centred on (x, y). Circles use
#     `size` as radius, squares `size` as side, triangles a side of
#     1.5 * size.
#
# class Compositor:
#   - apply(self, surface: pygame.Surface) -> None
#     - Side Effects: Fades, clears or feeds back the previous frame.
#
# class Visualizer:
#   - open(self) -> pygame.Surface
#     - Raises: SurfaceUnavailableError if the window cannot be created.
#   - handle_events(self, context, on_reset, on_audio_request) -> bool
#     - Outputs: False once the user asked to quit.
#     - Side Effects: Mutates context.pointers and the viewport size.

Point = Tuple[float, float]


def hsl_color(hue: float, saturation: float, lightness: float) -> pygame.Color:
    """Builds an opaque pygame colour from HSL components."""
    color = pygame.Color(0, 0, 0)
    color.hsla = (
        float(hue) % 360.0,
        clamp(float(saturation), 0.0, 100.0),
        clamp(float(lightness), 0.0, 100.0),
        100.0,
    )
    return color


def _transform(points: Sequence[Point], x: float, y: float, angle: float) -> list:
    """Rotates local shape points by `angle` and moves them to (x, y)."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return [
        (x + px * cos_a - py * sin_a, y + px * sin_a + py * cos_a)
        for px, py in points
    ]


def _draw_circle(surface, x, y, size, angle, color):
    pygame.draw.circle(surface, color, (x, y), size)


def _draw_square(surface, x, y, size, angle, color):
    half = size / 2
    corners = ((-half, -half), (half, -half), (half, half), (-half, half))
    pygame.draw.polygon(surface, color, _transform(corners, x, y, angle))


def _draw_triangle(surface, x, y, size, angle, color):
    reach = (size * TRIANGLE_RATIO) / 2
    points = ((0.0, -reach), (reach, reach), (-reach, reach))
    pygame.draw.polygon(surface, color, _transform(points, x, y, angle))


SHAPE_DRAWERS: Dict[Shape, Callable] = {
    Shape.CIRCLE: _draw_circle,
    Shape.SQUARE: _draw_square,
    Shape.TRIANGLE: _draw_triangle,
}


def draw_particle(surface: pygame.Surface, shape: Shape, x: float, y: float,
                  size: float, angle: float, color: pygame.Color) -> None:
    SHAPE_DRAWERS[shape](surface, float(x), float(y), float(size), float(angle), color)


class Compositor:
    """
    Prepares the surface for a new frame without a hard clear.

    "feedback" redraws the previous frame onto itself slightly rotated and
    zoomed in, giving a recursive spinning tunnel. "trail" lays a
    translucent fill over it so old frames fade out. "clear" wipes it.
    """
    def __init__(self, mode: str = COMPOSITE_MODE, rotation: float = FEEDBACK_ROTATION,
                 zoom: float = FEEDBACK_ZOOM, trail_alpha: int = TRAIL_ALPHA,
                 background: Tuple[int, int, int] = BACKGROUND_COLOR):
        if mode not in COMPOSITE_MODES:
            msg = f"Configuration error: unknown composite mode '{mode}', expected one of {COMPOSITE_MODES}."
            logging.critical(msg)
            raise ValueError(msg)
        self.mode = mode
        self.rotation = rotation
        self.zoom = zoom
        self.trail_alpha = trail_alpha
        self.background = tuple(background)
        self._trail_surface: Optional[pygame.Surface] = None

    def apply(self, surface: pygame.Surface) -> None:
        if self.mode == "feedback":
            self._apply_feedback(surface)
        elif self.mode == "trail":
            self._apply_trail(surface)
        else:
            surface.fill(self.background)

    def _apply_feedback(self, surface: pygame.Surface) -> None:
        # rotozoom turns counter-clockwise for positive angles, the feedback
        # spins clockwise on screen.
        snapshot = pygame.transform.rotozoom(surface, -math.degrees(self.rotation), self.zoom)
        surface.blit(snapshot, snapshot.get_rect(center=surface.get_rect().center))

    def _apply_trail(self, surface: pygame.Surface) -> None:
        size = surface.get_size()
        if self._trail_surface is None or self._trail_surface.get_size() != size:
            self._trail_surface = pygame.Surface(size, pygame.SRCALPHA)
            self._trail_surface.fill((*self.background, self.trail_alpha))
        surface.blit(self._trail_surface, (0, 0))


class Visualizer:
    """
    Owns the pygame window and translates its events into pointer updates.
    """
    def __init__(self, vis_params: Optional[dict] = None):
        vis_params = vis_params or {}
        self.fullscreen = bool(vis_params.get('fullscreen', FULLSCREEN))
        self.requested_size = (
            int(vis_params.get('window_width', WINDOW_WIDTH)),
            int(vis_params.get('window_height', WINDOW_HEIGHT)),
        )
        self.caption = vis_params.get('caption', "Swirl Particles")
        self.surface: Optional[pygame.Surface] = None
        self.width, self.height = self.requested_size

    def open(self) -> pygame.Surface:
        """
        Initializes Pygame and acquires the drawing surface.
        """
        try:
            pygame.init()
            if self.fullscreen:
                display_info = pygame.display.Info()
                size = (display_info.current_w, display_info.current_h)
                surface = pygame.display.set_mode(size, pygame.FULLSCREEN)
            else:
                surface = pygame.display.set_mode(self.requested_size, pygame.RESIZABLE)
        except pygame.error as e:
            raise SurfaceUnavailableError(f"Could not create the display window: {e}") from e

        if surface is None:
            raise SurfaceUnavailableError("Display returned no drawing surface.")

        pygame.display.set_caption(self.caption)
        surface.fill(BACKGROUND_COLOR)
        self.surface = surface
        self.width, self.height = surface.get_size()
        logging.info(f"Visualizer initialized with Pygame display ({self.width}x{self.height}).")
        return surface

    def handle_events(self, context: FrameContext,
                      on_reset: Callable[[], None],
                      on_audio_request: Callable[[], None],
                      events: Optional[list] = None) -> bool:
        """
        Drains pending events into the frame context.

        Returns:
            bool: False if the animation should exit, True otherwise.
        """
        if events is None:
            events = pygame.event.get()

        pointers = context.pointers
        for event in events:
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                if event.key == pygame.K_r:
                    on_reset()
                elif event.key == pygame.K_m:
                    on_audio_request()

            # Touches also arrive as synthetic mouse events; the finger
            # events below already cover them.
            elif event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEMOTION, pygame.MOUSEBUTTONUP):
                if getattr(event, 'touch', False):
                    continue
                if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    pointers.press(MOUSE_ID, *event.pos)
                elif event.type == pygame.MOUSEMOTION:
                    pointers.move(MOUSE_ID, *event.pos)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    pointers.release(MOUSE_ID)

            elif event.type == pygame.WINDOWLEAVE:
                pointers.release(MOUSE_ID)

            elif event.type == pygame.FINGERDOWN:
                pointers.press(event.finger_id, event.x * context.width, event.y * context.height)
            elif event.type == pygame.FINGERMOTION:
                pointers.move(event.finger_id, event.x * context.width, event.y * context.height)
            elif event.type == pygame.FINGERUP:
                pointers.release(event.finger_id)

            elif event.type == pygame.VIDEORESIZE:
                self._resize(context, event.w, event.h)

        return True

    def _resize(self, context: FrameContext, width: int, height: int) -> None:
        surface = pygame.display.get_surface()
        if surface is not None:
            self.surface = surface
        self.width, self.height = width, height
        context.resize(width, height)

    def present(self) -> None:
        pygame.display.flip()

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()

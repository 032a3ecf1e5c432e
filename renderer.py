# renderer.py
"""
Frame driver for a World.

WorldRenderer owns the current World and the accumulation Image it is
drawn onto, and turns externally scheduled frames into update/render
calls. It knows nothing about windows or events: the visualizer (or the
headless runner) calls frame() once per frame and forwards user actions.
"""
import logging
from color import Color
from image import Image
from world import World

# --- Data Contracts ---
#
# class WorldRenderer:
#   - __init__(self, world: World, width: int, height: int,
#              background: Color, frame_limit: int):
#     - Side Effects: Allocates the accumulation Image.
#
#   - frame(self) -> bool:
#     - Outputs: True if a tick was simulated and drawn, False if the
#       renderer is paused or the frame limit has been reached.
#     - Invariants: world.frame_idx never exceeds frame_limit through
#       frame().
#
#   - set_world(self, world: World) -> None:
#     - Side Effects: Replaces the World, clears the Image and resumes.


class WorldRenderer:
    """
    Drives one World onto one Image, frame by frame.
    """
    def __init__(self, world: World, width: int, height: int, background: Color, frame_limit: int):
        self.world = world
        self.image = Image(width, height, background)
        self.frame_limit = frame_limit
        self.paused = False
        logging.debug(f"Start renderer {width}x{height}, frame limit {frame_limit}.")

    @property
    def frame_idx(self) -> int:
        return self.world.frame_idx

    @property
    def finished(self) -> bool:
        return self.world.frame_idx >= self.frame_limit

    def frame(self) -> bool:
        """Simulates and draws one frame unless paused or finished."""
        if self.paused or self.finished:
            return False
        self.world.update()
        self.world.render(self.image)
        if self.finished:
            logging.info(f"Reached frame limit ({self.frame_limit}).")
        return True

    def pause_resume(self) -> None:
        self.paused = not self.paused
        logging.info("Renderer paused." if self.paused else "Renderer resumed.")

    def resume(self) -> None:
        self.paused = False

    def set_frame_limit(self, frame_limit: int) -> None:
        self.frame_limit = max(frame_limit, 1)
        self.resume()

    def set_world(self, world: World) -> None:
        """Swaps in a freshly built World and starts drawing it from scratch."""
        self.world = world
        self.clear()
        self.resume()

    def resize(self, width: int, height: int) -> None:
        logging.debug(f"Update renderer {width}x{height}.")
        self.image.resize(width, height)

    def clear(self) -> None:
        self.image.clear()

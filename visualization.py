# visualization.py
"""
Handles the presentation of the simulation using Pygame.

The accumulation Image is painted onto the window every frame, next to
a side panel listing the run parameters and a preview of the particle
palette. User input is translated into Actions for the main loop.
"""
import logging
import os
from enum import Enum, auto
from typing import List
import pygame
from color import Color
from constants import UI_PANEL_WIDTH, UI_BACKGROUND_ALPHA, PALETTE_WIDTH, PALETTE_HEIGHT
from image import Image
from params import Config, DisplayParams
from renderer import WorldRenderer
from world import World, render_palette

# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, width: int, height: int):
#     - Side Effects: Initializes Pygame and creates a resizable window.
#       The simulation area is the window minus the UI panel.
#
#   - poll_events(self) -> List[Action]:
#     - Outputs: the user actions received since the last call, in order.
#     - Side Effects: On a window resize, updates sim_width/sim_height
#       before reporting Action.RESIZE.
#
#   - draw(self, renderer: WorldRenderer, config: Config) -> None:
#     - Side Effects: Paints the renderer's Image and the UI panel.
#
# export_png(image: Image, path: str) -> str
# export_svg(world: World, path: str, background: Color) -> str
#   - Side Effects: Write the file, creating its directory if needed.
#   - Outputs: the written path.


class Action(Enum):
    QUIT = auto()
    PAUSE_RESUME = auto()
    RESET = auto()
    RANDOM_SEED = auto()
    SAVE_PNG = auto()
    SAVE_SVG = auto()
    RESIZE = auto()


KEY_ACTIONS = {
    pygame.K_ESCAPE: Action.QUIT,
    pygame.K_SPACE: Action.PAUSE_RESUME,
    pygame.K_r: Action.RESET,
    pygame.K_n: Action.RANDOM_SEED,
    pygame.K_s: Action.SAVE_PNG,
    pygame.K_v: Action.SAVE_SVG,
}


def image_to_surface(image: Image) -> pygame.Surface:
    """Wraps the Image raster in a Pygame surface."""
    return pygame.image.frombuffer(image.to_raster_bytes(), (image.width, image.height), 'RGBA')


def export_png(image: Image, path: str) -> str:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    pygame.image.save(image_to_surface(image), path)
    logging.info(f"Saved PNG ({image.width}x{image.height}) to {path}.")
    return path


def export_svg(world: World, path: str, background: Color) -> str:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(world.generate_svg(background))
    logging.info(f"Saved SVG to {path}.")
    return path


class Visualizer:
    """
    Paints the accumulation image and the parameter panel.
    """
    def __init__(self, width: int, height: int):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()
        pygame.font.init()

        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self._update_layout(width, height)

        pygame.display.set_caption("Followers")
        self.clock = pygame.time.Clock()

        # Use a cleaner, sans-serif font. Pygame will fall back if 'Segoe UI' is not found.
        try:
            self.font_main = pygame.font.SysFont("Segoe UI", 14)
            self.font_main_bold = pygame.font.SysFont("Segoe UI", 14, bold=True)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_main = pygame.font.SysFont(None, 18)
            self.font_main_bold = pygame.font.SysFont(None, 18, bold=True)

        self.text_color_key = (200, 200, 200)
        self.text_color_value = (255, 255, 255)
        self.param_box_color = (60, 60, 60, 160)
        self.param_box_spacing = 4
        self.panel_margin = 20

        self.palette_surface = None

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def _update_layout(self, width: int, height: int):
        # The simulation area is the total width minus the UI panel
        self.sim_width = max(width - UI_PANEL_WIDTH, 1)
        self.sim_height = max(height, 1)
        self.ui_panel_surface = pygame.Surface((UI_PANEL_WIDTH, self.sim_height), pygame.SRCALPHA)
        self.ui_panel_surface.fill((40, 40, 40, UI_BACKGROUND_ALPHA))

    def set_palette(self, display_params: DisplayParams):
        """Re-renders the palette preview for new display parameters."""
        palette = render_palette(display_params, PALETTE_WIDTH, PALETTE_HEIGHT)
        # frombuffer shares memory with the bytes object; copy to own it.
        self.palette_surface = image_to_surface(palette).copy()

    def poll_events(self) -> List[Action]:
        actions = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                actions.append(Action.QUIT)
            elif event.type == pygame.KEYDOWN and event.key in KEY_ACTIONS:
                actions.append(KEY_ACTIONS[event.key])
            elif event.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.get_surface()
                self._update_layout(event.w, event.h)
                actions.append(Action.RESIZE)
        return actions

    def _render_text_wrapped(
        self, text: str, font: pygame.font.Font, max_width: int, color: tuple
    ) -> list:
        """
        Renders text, wrapping it to a new line if it exceeds max_width.
        Returns a list of rendered surfaces, one for each line.
        """
        lines = []
        current_line = ""
        for word in text.split(' '):
            test_line = f"{current_line} {word}".strip()
            if font.size(test_line)[0] <= max_width:
                current_line = test_line
            else:
                lines.append(current_line)
                current_line = word
        lines.append(current_line)
        return [font.render(line, True, color) for line in lines if line]

    def _panel_entries(self, renderer: WorldRenderer, config: Config) -> list:
        sim = config.sim_params
        display = config.display_params
        if renderer.finished:
            state = "finished"
        else:
            state = "paused" if renderer.paused else "running"
        return [
            ("Seed", sim.seed.as_str()),
            ("Particles", str(sim.particle_count)),
            ("Acc Limit", f"2^{sim.acc_limit}"),
            ("Hue", f"{display.particle_color_hue_mid:.0f} ± {display.particle_color_hue_spread / 2:.0f}"),
            ("Saturation", f"{display.particle_color_saturation_mid:.0f} ± {display.particle_color_saturation_spread / 2:.0f}"),
            ("Brightness", f"{display.particle_color_value:.0f}"),
            ("Opacity", f"{display.particle_color_alpha:.0f}"),
            ("Frame", f"{renderer.frame_idx} / {renderer.frame_limit}"),
            ("State", state),
            ("Keys", "space pause, r reset, n new seed, s png, v svg, esc quit"),
        ]

    def _draw_panel(self, renderer: WorldRenderer, config: Config):
        """Renders run parameters in a list of individual, transparent boxes."""
        self.screen.blit(self.ui_panel_surface, (self.sim_width, 0))

        box_v_padding = 8
        line_height = self.font_main.get_linesize()
        key_value_gap = 20
        panel_x = self.sim_width + self.panel_margin
        panel_width = UI_PANEL_WIDTH - 2 * self.panel_margin
        current_y = self.panel_margin

        if self.palette_surface is not None:
            self.screen.blit(self.palette_surface, (panel_x, current_y))
            current_y += self.palette_surface.get_height() + self.panel_margin

        key_max_width = (panel_width - key_value_gap) / 3 - box_v_padding
        value_max_width = panel_width - key_max_width - key_value_gap - 2 * box_v_padding
        key_column_right_x = panel_x + box_v_padding + key_max_width
        value_column_left_x = key_column_right_x + key_value_gap

        for key, value in self._panel_entries(renderer, config):
            key_surfs = self._render_text_wrapped(key, self.font_main_bold, key_max_width, self.text_color_key)
            value_surfs = self._render_text_wrapped(value, self.font_main, value_max_width, self.text_color_value)

            num_lines = max(len(key_surfs), len(value_surfs))
            box_height = num_lines * line_height + box_v_padding * 2
            box_rect = pygame.Rect(panel_x, current_y, panel_width, box_height)
            pygame.draw.rect(self.screen, self.param_box_color, box_rect, border_radius=6)

            line_y = current_y + box_v_padding
            for surf in key_surfs:
                self.screen.blit(surf, surf.get_rect(topright=(key_column_right_x, line_y)))
                line_y += line_height
            line_y = current_y + box_v_padding
            for surf in value_surfs:
                self.screen.blit(surf, surf.get_rect(topleft=(value_column_left_x, line_y)))
                line_y += line_height

            current_y += box_height + self.param_box_spacing

    def draw(self, renderer: WorldRenderer, config: Config):
        """Paints the accumulation image and the UI panel."""
        self.screen.fill((0, 0, 0))
        self.screen.blit(image_to_surface(renderer.image), (0, 0))
        self._draw_panel(renderer, config)
        pygame.display.flip()

    def tick(self, fps: int):
        self.clock.tick(fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()

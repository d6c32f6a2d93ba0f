# cradle_renderer.py

import pygame

import constants


def _round_line(surface: pygame.Surface, color, start, end, width: int):
    """pygame lines have square ends; cap them with discs."""
    pygame.draw.line(surface, color, start, end, width)
    cap_radius = width / 2
    pygame.draw.circle(surface, color, start, cap_radius)
    pygame.draw.circle(surface, color, end, cap_radius)


def draw_cradle(screen: pygame.Surface, render_items: list, beam_segment: tuple):
    """
    Draws the pivot beam, the strings and the bobs.

    Data Contract:
    - Inputs:
        - screen (pygame.Surface): Target surface, cleared by this function.
        - render_items (list of RenderItem): One per bob, in bob order.
        - beam_segment (tuple): Beam start and end points.
    - Outputs: None.
    - Side Effects: Draws on `screen`.
    """
    screen.fill(constants.BACKGROUND_COLOR)

    beam_start, beam_end = beam_segment
    _round_line(screen, constants.BEAM_COLOR, beam_start, beam_end, constants.BEAM_WIDTH)

    for item in render_items:
        position = (item.position[0], item.position[1])
        _round_line(screen, constants.STRING_COLOR, item.anchor, position, constants.STRING_WIDTH)

        color = constants.DRAG_HIGHLIGHT if item.is_dragged else item.color
        pygame.draw.circle(screen, color, position, item.radius)
        _draw_shine(screen, position, item.radius)


def _draw_shine(screen: pygame.Surface, position: tuple, radius: float):
    """Translucent highlight up and to the left of the bob's centre."""
    shine_radius = radius * 0.6
    size = int(shine_radius * 2) + 2
    shine = pygame.Surface((size, size), pygame.SRCALPHA)
    pygame.draw.circle(shine, constants.SHINE_COLOR, (size / 2, size / 2), shine_radius)
    screen.blit(shine, (position[0] - radius * 0.2 - size / 2, position[1] - radius * 0.2 - size / 2))

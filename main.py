# main.py

import pygame
import constants
import json
import logging
import logger_setup
from cradle_config import CradleConfig, SetBobCount, SetGap, SetMassMode, SetMassOverride
from cradle_renderer import draw_cradle
from physics_world import PhysicsWorld
from simulation_session import SimulationSession, ResetCradle, ResizeViewport

# Get the application's dedicated logger
logger = logging.getLogger("cradle_sim")

ENERGY_LOG_INTERVAL = 100  # Ticks


def command_for_key(key: int, session: SimulationSession, selected_bob: int):
    """
    Maps a key press to a configuration command, or None.
    The keyboard replaces the sliders and checkboxes of a web UI.
    """
    config = session.config
    if key == pygame.K_UP:
        return SetBobCount(config.bob_count + 1)
    if key == pygame.K_DOWN:
        return SetBobCount(config.bob_count - 1)
    if key == pygame.K_g:
        return SetGap(not config.contact_gap)
    if key == pygame.K_m:
        next_mode = constants.MASS_MODE_INDIVIDUAL if config.is_uniform else constants.MASS_MODE_UNIFORM
        return SetMassMode(next_mode)
    if key in (pygame.K_LEFT, pygame.K_RIGHT) and not config.is_uniform:
        step = constants.MASS_RATIO_STEP if key == pygame.K_RIGHT else -constants.MASS_RATIO_STEP
        return SetMassOverride(selected_bob, config.mass_overrides[selected_bob] + step)
    if key == pygame.K_r:
        return ResetCradle()
    return None


def update_caption(session: SimulationSession, selected_bob: int):
    config = session.config
    caption = (
        f"{constants.TITLE} | bobs: {config.bob_count} | gap: {'on' if config.contact_gap else 'off'} "
        f"| mass: {config.mass_mode}"
    )
    if not config.is_uniform:
        caption += f" | bob {selected_bob + 1}: {config.mass_overrides[selected_bob]:.1f}"
    pygame.display.set_caption(caption)


def handle_event(event, session: SimulationSession, selected_bob: int):
    """
    Routes one pygame event to the session.
    Returns (session, selected_bob, keep_running); the session is replaced
    whenever the event triggers a rebuild.
    """
    if event.type == pygame.QUIT:
        return session, selected_bob, False
    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        session.pointer_down(*event.pos)
    elif event.type == pygame.MOUSEMOTION:
        session.pointer_move(*event.pos)
    elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
        session.pointer_up()
    elif event.type == pygame.WINDOWLEAVE:
        # A release must not be left pending outside the window
        session.pointer_up()
    elif event.type == pygame.VIDEORESIZE:
        session = session.apply(ResizeViewport(event.w, event.h))
    elif event.type == pygame.KEYDOWN:
        if event.key in (pygame.K_ESCAPE, pygame.K_q):
            return session, selected_bob, False
        if event.key == pygame.K_TAB:
            selected_bob = (selected_bob + 1) % session.config.bob_count
        else:
            command = command_for_key(event.key, session, selected_bob)
            if command is not None:
                session = session.apply(command)
                selected_bob = min(selected_bob, session.config.bob_count - 1)
        update_caption(session, selected_bob)
    return session, selected_bob, True


def run_simulation_loop(session: SimulationSession, screen: pygame.Surface, clock: pygame.time.Clock):
    """
    The frame driver. Each tick handles pending input, advances the engine by
    one fixed timestep and draws the resulting positions. Rebuilds happen only
    between engine steps.
    """
    running = True
    selected_bob = 0
    update_caption(session, selected_bob)

    while running:
        # --- Event handling ---
        for event in pygame.event.get():
            session, selected_bob, keep_running = handle_event(event, session, selected_bob)
            running = running and keep_running

        # --- Physics ---
        session.tick()

        # --- Logging (throttled) ---
        if session.world.tick % ENERGY_LOG_INTERVAL == 0:
            ke = session.world.get_total_kinetic_energy()
            pe = session.world.get_total_potential_energy()
            px, py = session.world.get_total_momentum()
            logger.debug(
                f"Tick={session.world.tick}, "
                f"Epoch={session.epoch}, "
                f"Kinetic={ke:.2f}, "
                f"Potential={pe:.2f}, "
                f"Total={ke + pe:.2f}, "
                f"Momentum=({px:+.2f}, {py:+.2f})"
            )

        # --- Drawing ---
        draw_cradle(screen, session.render_items(), session.beam_segment())
        pygame.display.flip()
        clock.tick(constants.FPS)


def main():
    """
    Main function to initialize and run the cradle simulation.
    """
    # --- Setup ---
    logger_setup.setup_logging()

    with open('config.json', 'r') as f:
        config = json.load(f)
    sim_config = config['simulation']

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # --- Initialization ---
    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()

    world = PhysicsWorld(sim_config)
    session = SimulationSession.create(
        world,
        CradleConfig.from_dict(config.get('cradle', {})),
        (constants.WIDTH, constants.HEIGHT),
        sim_config,
    )

    run_simulation_loop(session, screen, clock)

    logger.info("Application shutting down.")
    pygame.quit()


if __name__ == "__main__":
    main()

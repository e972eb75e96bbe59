# main.py
"""
Main entry point for the particle field app.

This script orchestrates the entire lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Opens the window, loads the images and populates the field.
4. Runs the frame loop: one update and one draw per frame.
5. Handles clean shutdown.
"""
import logging
from utils import setup_logging, load_config
import cProfile
import pstats
import io


def main(config_path: str = 'config.json'):
    """
    The main function to run the app.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Particle Field Starting ---")

    field_params = config.get('field', {})
    image_paths = config.get('images', [])
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from settings import FieldConfig
    from simulation import Field
    from surface import load_images
    from visualization import Visualizer

    field_config = FieldConfig.from_dict(field_params)

    # --- Component Initialization ---
    # 1. The visualizer determines the field dimensions.
    visualizer = Visualizer(vis_params)

    # 2. Images are loaded after the display exists so they can be converted.
    images = load_images(image_paths)

    # 3. Build the field and sample the first image.
    field = Field(visualizer.width, visualizer.height, images, field_config)
    field.init(visualizer.sampling_surface)

    profiler = cProfile.Profile() if run_params.get('profile', False) else None

    log_throttle = run_params.get('log_throttle_steps', 300)
    max_steps = run_params.get('max_steps', 0)  # 0 runs until the window closes

    running = True
    step_num = 0

    if profiler is not None:
        profiler.enable()
    while running:
        if not visualizer.handle_events(field):
            break

        field.update()
        visualizer.draw(field)
        step_num += 1

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Frame {step_num}: {len(field.particles)} particles.")
            logging.debug(f"Frame {step_num} | Average Speed: {field.average_speed():.4f}")

        if max_steps and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping.")
            running = False
    if profiler is not None:
        profiler.disable()

    visualizer.close()
    logging.info("Frame loop finished.")

    if profiler is not None:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Field Shutting Down ---")


if __name__ == "__main__":
    main()

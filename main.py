"""
Headless CHIP-8 runner: load a ROM, run it for a number of cycles and print the screen.

    python main.py rom_path=roms/IBM.ch8 num_cycles=1000 log_level=DEBUG
    python main.py rom_path=roms/IBM.ch8 output_path=ibm.png render_scale=4 color_scheme=amber
"""

import sys

from omegaconf import OmegaConf

from chip8vm import load_rom, run_cycles, framebuffer_to_text, save_frame, Chip8Error
from chip8vm.config import load_config, create_state_from_config
from chip8vm.logging import get_logger


def run_emulator(cfg):
    """Run the configured ROM and return the final state, or None if it failed to load."""
    logger = get_logger()
    logger.set_level(cfg.log_level)
    logger.debug("Configuration:\n" + OmegaConf.to_yaml(cfg))

    state = create_state_from_config(cfg)
    try:
        state = load_rom(state, cfg.rom_path)
    except Chip8Error as e:
        logger.error(str(e))
        return None

    state = run_cycles(state, cfg.num_cycles, cfg.show_progress)
    logger.info(f"Ran {cfg.num_cycles} cycles")
    logger.registers(state)
    logger.faults(state)

    print(framebuffer_to_text(state.framebuffer))
    if cfg.output_path is not None:
        save_frame(state.framebuffer, cfg.output_path, cfg.render_scale, cfg.color_scheme)
        logger.info(f"Saved screen to {cfg.output_path}")
    return state


if __name__ == "__main__":
    config = load_config(overrides=sys.argv[1:])
    if config.rom_path is None:
        get_logger().error("No ROM given, pass rom_path=<file>")
        sys.exit(2)
    if run_emulator(config) is None:
        sys.exit(1)

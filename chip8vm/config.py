"""Emulator configuration.

Settings live in a dataclass schema and are materialised as an OmegaConf
structured config, so YAML files and ``key=value`` overrides are type-checked
against the schema and unknown keys are rejected.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import jax
from omegaconf import DictConfig, OmegaConf

from chip8vm.state import EmulatorState, create_state


@dataclass
class EmulatorConfig:
    seed: int = 0
    rom_path: Optional[str] = None
    num_cycles: int = 600
    show_progress: bool = False
    log_level: str = "INFO"
    color_scheme: str = "classic"
    render_scale: int = 8
    output_path: Optional[str] = None


def load_config(path: Optional[str] = None, overrides: Iterable[str] = ()) -> DictConfig:
    """Build the configuration from defaults, an optional YAML file and dotlist overrides."""
    cfg = OmegaConf.structured(EmulatorConfig)
    if path is not None:
        cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
    overrides = list(overrides)
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(overrides))
    return cfg


def create_state_from_config(cfg: DictConfig) -> EmulatorState:
    """Fresh emulator state whose random source is seeded from ``cfg.seed``."""
    return create_state(jax.random.PRNGKey(cfg.seed))

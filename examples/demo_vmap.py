"""Run many copies of one ROM side by side and compare where they ended up.

    python examples/demo_vmap.py roms/random.ch8 64
"""

import sys
import time

import jax
import numpy as np

from chip8vm import create_state, load_rom, cycle, framebuffer_to_text
from chip8vm.logging import get_logger


def run_batch(state, rngs, num_cycles):
    """Run one copy of ``state`` per rng key, each with its own random source."""
    states = jax.vmap(lambda rng: state.replace(rng=rng))(rngs)

    def step(states, _):
        return jax.vmap(cycle)(states), None

    states, _ = jax.lax.scan(step, states, length=num_cycles)
    return states


if __name__ == "__main__":
    logger = get_logger()
    rom_path = sys.argv[1]
    num_machines = int(sys.argv[2]) if len(sys.argv) > 2 else 64
    num_cycles = 1000

    state = load_rom(create_state(), rom_path)
    rngs = jax.random.split(jax.random.PRNGKey(0), num_machines)

    compiled = jax.jit(run_batch, static_argnums=2).lower(state, rngs, num_cycles).compile()

    start = time.perf_counter()
    states = jax.block_until_ready(compiled(state, rngs))
    elapsed = time.perf_counter() - start

    logger.info(f"{num_machines} machines x {num_cycles} cycles in {elapsed:.3f}s "
                f"({num_machines * num_cycles / elapsed:,.0f} cycles/s)")

    # Machines only diverge through CXKK, so identical screens collapse together
    screens, first, counts = np.unique(
        np.asarray(states.framebuffer) != 0, axis=0, return_index=True, return_counts=True
    )
    logger.info(f"{len(screens)} distinct final screens")
    for index, count in sorted(zip(first, counts), key=lambda pair: -pair[1])[:2]:
        logger.info(f"Machine {index} ({count} machines share this screen):")
        print(framebuffer_to_text(states.framebuffer[index]))

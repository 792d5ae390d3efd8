"""Tests for the fetch/execute cycle and program loading."""

import jax
import jax.numpy as jnp
import pytest
from chip8vm import (
    create_state, fetch, cycle, run_cycles, tick_timers, load_program, load_rom, is_sound_active,
    PROGRAM_START, FONT_START, RomLoadError, RomTooLargeError,
)
from chip8vm.constants import FONT_DATA, MAX_PROGRAM_SIZE


def program_state(words, state=None):
    """Fresh state with the given 16-bit words loaded at 0x200."""
    data = b"".join(word.to_bytes(2, "big") for word in words)
    return load_program(state if state is not None else create_state(), data)


class TestInitialState:
    """Test the power-on state."""

    def test_initial_registers(self, fresh_state):
        assert fresh_state.pc == PROGRAM_START
        assert fresh_state.I == 0
        assert not jnp.any(fresh_state.V)
        assert fresh_state.stack.pointer == 0
        assert not jnp.any(fresh_state.framebuffer)
        assert not jnp.any(fresh_state.keypad)

    def test_font_loaded(self, fresh_state):
        assert jnp.array_equal(fresh_state.memory[FONT_START:FONT_START + 80], FONT_DATA)
        assert not jnp.any(fresh_state.memory[PROGRAM_START:])


class TestFetch:
    """Test instruction fetch."""

    def test_fetch_big_endian(self):
        state = program_state([0x1234])

        state, instruction = fetch(state)

        assert instruction == 0x1234
        assert state.opcode == 0x1234
        assert state.pc == PROGRAM_START + 2

    def test_fetch_wraps_at_end_of_memory(self, fresh_state):
        memory = fresh_state.memory.at[0xFFF].set(0xAB).at[0x000].set(0xCD)
        state = fresh_state.replace(memory=memory, pc=jnp.astype(0xFFF, jnp.uint16))

        _, instruction = fetch(state)

        assert instruction == 0xABCD


class TestCycle:
    """Test full cycles."""

    def test_cycle_executes_after_pc_advance(self):
        """Skips and calls see the already advanced pc."""
        state = program_state([0x3000, 0x6001, 0x6102])  # skip if V0 == 0

        state = cycle(state)

        assert state.pc == PROGRAM_START + 4

    def test_cycle_ticks_timers(self):
        state = program_state([0x6001, 0x6001])
        state = state.replace(delay_timer=jnp.astype(2, jnp.uint8), sound_timer=jnp.astype(1, jnp.uint8))

        state = cycle(state)
        assert state.delay_timer == 1
        assert state.sound_timer == 0
        assert not is_sound_active(state)

        state = cycle(state)
        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_timer_set_then_ticked_same_cycle(self):
        state = program_state([0x6005, 0xF015])

        state = cycle(cycle(state))

        assert state.delay_timer == 4

    def test_tick_timers_at_zero(self, fresh_state):
        state = tick_timers(fresh_state)
        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_call_then_return(self):
        """2NNN then 00EE comes back to the instruction after the call."""
        state = program_state([0x2206, 0x6001, 0x0000, 0x00EE])

        state = cycle(state)
        assert state.pc == 0x206
        assert state.stack.pointer == 1

        state = cycle(state)
        assert state.pc == PROGRAM_START + 2
        assert state.stack.pointer == 0

    def test_wait_for_key_stalls_then_resumes(self):
        state = program_state([0xF50A, 0x6001])

        state = cycle(state)
        assert state.pc == PROGRAM_START
        state = cycle(state)
        assert state.pc == PROGRAM_START

        keypad = state.keypad.at[9].set(True).at[3].set(True)
        state = cycle(state.replace(keypad=keypad))

        assert state.V[5] == 3
        assert state.pc == PROGRAM_START + 2

    def test_sound_active(self):
        state = program_state([0x6003, 0xF018])

        state = cycle(cycle(state))

        assert state.sound_timer == 2
        assert is_sound_active(state)


class TestRunCycles:
    """Test the compiled multi-cycle runner."""

    LOOP = [0x7001, 0x1200]  # V0 += 1; jump back

    def test_matches_single_cycles(self):
        state = program_state(self.LOOP)

        expected = state
        for _ in range(10):
            expected = cycle(expected)

        result = run_cycles(state, 10)

        assert result.V[0] == 5
        assert jnp.array_equal(result.V, expected.V)
        assert result.pc == expected.pc

    def test_zero_cycles(self):
        state = program_state(self.LOOP)

        result = run_cycles(state, 0)

        assert result.pc == state.pc
        assert jnp.array_equal(result.V, state.V)

    def test_with_progress_bar(self):
        state = program_state(self.LOOP)

        result = run_cycles(state, 40, True)

        assert result.V[0] == 20

    def test_vmap_over_seeds(self):
        """States are pytrees, so several machines run side by side."""
        rngs = jax.random.split(jax.random.PRNGKey(0), 4)
        states = jax.vmap(create_state)(rngs)
        memory = states.memory.at[:, PROGRAM_START:PROGRAM_START + 2].set(jnp.array([0xC0, 0xFF], dtype=jnp.uint8))
        states = states.replace(memory=memory)

        states = jax.vmap(cycle)(states)

        assert states.V.shape == (4, 16)
        assert jnp.all(states.pc == PROGRAM_START + 2)


class TestLoadProgram:
    """Test program loading."""

    def test_round_trip(self, fresh_state):
        data = bytes(range(256)) * 3

        state = load_program(fresh_state, data)

        assert bytes(state.memory[PROGRAM_START:PROGRAM_START + len(data)].tolist()) == data

    def test_load_leaves_other_state(self, fresh_state):
        state = load_program(fresh_state, b"\x60\x01")

        assert state.pc == fresh_state.pc
        assert jnp.array_equal(state.V, fresh_state.V)
        assert jnp.array_equal(state.memory[:PROGRAM_START], fresh_state.memory[:PROGRAM_START])

    def test_accepts_byte_sequences(self, fresh_state):
        state = load_program(fresh_state, [0x12, 0x00])
        assert state.memory[PROGRAM_START] == 0x12

    def test_maximum_size(self, fresh_state):
        state = load_program(fresh_state, b"\xAA" * MAX_PROGRAM_SIZE)
        assert state.memory[0xFFF] == 0xAA

    def test_too_large(self, fresh_state):
        with pytest.raises(RomTooLargeError) as excinfo:
            load_program(fresh_state, b"\x00" * (MAX_PROGRAM_SIZE + 1))

        assert excinfo.value.size == MAX_PROGRAM_SIZE + 1
        assert excinfo.value.capacity == MAX_PROGRAM_SIZE
        assert isinstance(excinfo.value, ValueError)

    def test_load_rom_file(self, fresh_state, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(b"\x00\xE0\x12\x00")

        state = load_rom(fresh_state, str(rom))

        assert [int(v) for v in state.memory[PROGRAM_START:PROGRAM_START + 4]] == [0x00, 0xE0, 0x12, 0x00]

    def test_load_rom_missing_file(self, fresh_state, tmp_path):
        with pytest.raises(RomLoadError):
            load_rom(fresh_state, str(tmp_path / "missing.ch8"))

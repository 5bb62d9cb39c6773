"""Tests for the debug step gate and its text views."""

import pytest
from chip8jax import DebugStepper, StepMode, Command, parse_command, execute, press_key
from chip8jax.debugger import console_commands, format_registers, format_display, next_opcode
from conftest import program_state


class TestParseCommand:

    @pytest.mark.parametrize("text,command", [
        ("h", Command.HELP),
        ("?", Command.HELP),
        ("r", Command.REGISTERS),
        ("d", Command.DISPLAY),
        ("s", Command.STEP),
        ("", Command.STEP),
        ("  step ", Command.STEP),
        ("C", Command.RUN),
        ("q", Command.QUIT),
    ])
    def test_commands(self, text, command):
        assert parse_command(text) == command

    def test_unknown_command(self):
        with pytest.raises(ValueError, match="Unknown command"):
            parse_command("x")

    def test_console_reprompts(self):
        lines = iter(["zzz", "r"])
        errors = []
        next_command = console_commands(read=lambda prompt: next(lines), write=errors.append)

        assert next_command() == Command.REGISTERS
        assert len(errors) == 1


class TestGate:

    def make_stepper(self, *commands):
        output = []
        return DebugStepper(iter(commands).__next__, write=output.append), output

    def test_starts_in_step_into(self):
        stepper, _ = self.make_stepper()
        assert stepper.mode == StepMode.STEP_INTO

    def test_step_allows_one(self):
        stepper, output = self.make_stepper(Command.STEP)
        assert stepper.gate(program_state(0x6A12)) is True
        assert stepper.mode == StepMode.STEP_INTO
        assert output == ["0x200: 6A12  6xkk - LD Vx, byte: set Vx = kk"]

    def test_info_commands_then_step(self):
        stepper, output = self.make_stepper(
            Command.HELP, Command.REGISTERS, Command.DISPLAY, Command.STEP)
        assert stepper.gate(program_state(0x00E0))
        assert len(output) == 4
        assert "Debugger commands" in output[1]
        assert output[2].startswith("PC: 0x200")
        assert len(output[3].splitlines()) == 32

    def test_run_then_passthrough(self):
        stepper, output = self.make_stepper(Command.RUN)
        state = program_state(0x1200)
        assert stepper.gate(state)
        assert stepper.gate(state)
        assert stepper.mode == StepMode.RUN
        assert len(output) == 1

    def test_quit(self):
        stepper, _ = self.make_stepper(Command.QUIT)
        assert stepper.gate(program_state(0x1200)) is False

    def test_interrupt(self):
        stepper, output = self.make_stepper(Command.RUN, Command.STEP)
        state = program_state(0x1200)
        stepper.gate(state)

        stepper.interrupt()

        assert stepper.mode == StepMode.STEP_INTO
        assert stepper.gate(state)
        assert len(output) == 2


class TestViews:

    def test_format_registers(self):
        state = program_state(0x1200)
        state = execute(state, 0x6AFE)
        state = execute(state, 0xA123)
        state = execute(state, 0x2300)
        text = format_registers(state)

        assert "PC: 0x300" in text
        assert "I: 0x123" in text
        assert "SP: 1" in text
        assert "VA: FE" in text
        assert "Stack: 200" in text

    def test_format_registers_waiting(self):
        state = execute(program_state(0x1200), 0xF40A)
        assert "Waiting for key -> V4" in format_registers(state)

    def test_format_registers_held_keys(self):
        state = program_state(0x1200)
        assert "Keys: <none>" in format_registers(state)

        state = press_key(press_key(state, 0xA), 0x3)
        assert "Keys: 3 A" in format_registers(state)

    def test_format_display(self):
        state = program_state(0x1200)
        state = state.replace(display=state.display.at[2, 1].set(True))
        rows = format_display(state).splitlines()

        assert len(rows) == 32
        assert all(len(row) == 64 for row in rows)
        assert rows[1][2] == "#"
        assert rows[0] == "." * 64

    def test_next_opcode(self):
        state = program_state(0xABCD)
        assert next_opcode(state) == 0xABCD

"""Tests for the command line front end."""

import io
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from bfstep.cli import format_trace_line, main, run_batch, run_paced
from bfstep.engine import ExecutionEngine
from bfstep.session import ControlSession
from bfstep.state import Status


PRINT_A = "++++++++[>++++++++<-]>+."


@pytest.fixture(autouse=True)
def restore_logging():
    """main() installs a root handler; drop it after each test."""
    handlers = list(logging.root.handlers)
    level = logging.root.level
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


def feed_stdin(monkeypatch, data):
    if isinstance(data, str):
        data = data.encode("utf-8")
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data), encoding="utf-8"))


class TestBatchModes:

    def test_default_mode(self, capsys):
        assert main([PRINT_A]) == 0
        assert capsys.readouterr().out == "A"

    def test_dump_mode(self, capsys):
        """dump prints the tape after the output."""
        assert main([PRINT_A, "--mode", "dump"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("A")
        assert "--- DATA ---" in out
        assert "[0, 65]" in out
        assert "Cycles: " in out
        assert "Status: Halted" in out

    def test_debug_mode(self, capsys):
        """debug prints one line per step."""
        assert main(["++.", "--mode", "debug"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "1: data(*0=1) instr(*1=INCREMENT)"
        assert lines[1] == "2: data(*0=2) instr(*2=OUTPUT)"
        assert lines[2] == "3: data(*0=2) instr(*3=<end+0>)"

    def test_file(self, tmp_path, capsys):
        path = tmp_path / "a.bf"
        path.write_text(PRINT_A)
        assert main(["--file", str(path)]) == 0
        assert capsys.readouterr().out == "A"

    def test_missing_file(self, tmp_path, capsys):
        assert main(["--file", str(tmp_path / "nope.bf")]) == 1
        assert "not found" in capsys.readouterr().out

    def test_directory_as_file(self, tmp_path, capsys):
        assert main(["--file", str(tmp_path)]) == 1
        assert "Could not read" in capsys.readouterr().out

    def test_code_from_stdin(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, PRINT_A)
        assert main([]) == 0
        assert capsys.readouterr().out == "A"

    def test_program_input_from_stdin(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, "hi")
        assert main([",[.,]", "--stdin"]) == 0
        assert capsys.readouterr().out == "hi"

    def test_inline_input(self, capsys):
        assert main([",[.,]", "--input", "ok"]) == 0
        assert capsys.readouterr().out == "ok"

    def test_output_bytes_are_raw(self, capsysbinary):
        """Output above 127 reaches stdout unchanged."""
        assert main(["+" * 200 + "."]) == 0
        assert capsysbinary.readouterr().out == b"\xc8"

    def test_binary_program_input(self, monkeypatch, capsysbinary):
        feed_stdin(monkeypatch, b"\xc8\xff")
        assert main([",[.,]", "--stdin"]) == 0
        assert capsysbinary.readouterr().out == b"\xc8\xff"

    def test_non_utf8_file(self, tmp_path, capsysbinary):
        """Undecodable bytes in a program file are skipped as comments."""
        path = tmp_path / "a.bf"
        path.write_bytes(b"+\xff\xfe.")
        assert main(["--file", str(path)]) == 0
        assert capsysbinary.readouterr().out == b"\x01"


class TestBatchErrors:

    def test_unmatched_bracket(self, capsys):
        assert main(["["]) == 1
        assert "Unmatched" in capsys.readouterr().out

    def test_underflow(self, capsys):
        assert main(["+<"]) == 1
        out = capsys.readouterr().out
        assert "TapeUnderflow at instruction 1" in out

    def test_max_cycles(self, capsys):
        assert main(["+[]", "--max-cycles", "10"]) == 1
        assert "Max cycles (10) exceeded" in capsys.readouterr().out

    def test_stdin_conflict(self):
        """Program and its input cannot both come from stdin."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--stdin"])
        assert exc_info.value.code == 2

    def test_code_and_file_conflict(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["+", "--file", str(tmp_path / "a.bf")])


class TestStreaming:
    """Batch runs write output and trace lines while the program is running."""

    def test_output_written_before_run_ends(self, monkeypatch, capsysbinary):
        engine = ExecutionEngine.build("+.[]")
        written = []
        step = engine.step

        def recording_step():
            written.append(capsysbinary.readouterr().out)
            return step()

        monkeypatch.setattr(engine, "step", recording_step)
        assert run_batch(engine, max_cycles=20) == 1
        assert b"\x01" in b"".join(written)

    def test_debug_non_terminating(self, capsys):
        """debug prints a line per step of a looping program without keeping a trace."""
        assert main(["+[]", "--mode", "debug", "--max-cycles", "5"]) == 1
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "1: data(*0=1) instr(*1=JUMP_IF_ZERO)"
        assert lines[1] == "2: data(*0=1) instr(*2=JUMP_IF_NONZERO)"
        assert sum(1 for line in lines if ": data(" in line) == 5
        assert lines[-1] == "Error: Max cycles (5) exceeded"


class TestTraceLine:

    def test_format(self):
        engine = ExecutionEngine.build("+>", trace=True)
        engine.run_to_completion()
        lines = [format_trace_line(engine, entry.post_state) for entry in engine.trace]
        assert lines == [
            "1: data(*0=1) instr(*1=MOVE_RIGHT)",
            "2: data(*1=0) instr(*2=<end+0>)",
            "2: data(*1=0) instr(*2=<end+0>)",
        ]


class TestInteractive:

    def test_commands_and_steps(self, monkeypatch, capsys):
        """Blank lines step; commands apply; errors are reported and skipped."""
        feed_stdin(monkeypatch, "set data = 65\n\nbogus\nquit\n")
        assert main([".", "--mode", "interactive"]) == 0
        out = capsys.readouterr().out
        assert "output='A'" in out
        assert "Error: unknown command 'bogus'" in out

    def test_run(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, "set speed = 1000\nrun\nquit\n")
        assert main(["+++.", "--mode", "interactive"]) == 0
        out = capsys.readouterr().out
        assert "status=Halted" in out
        assert "speed=1000" in out

    def test_errored_exit_code(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, "\n")
        assert main(["<", "--mode", "interactive"]) == 1
        assert "status=Errored(TapeUnderflow)" in capsys.readouterr().out

    def test_empty_program(self, monkeypatch, capsys, tmp_path):
        """Interactive mode starts with an empty program and can load one."""
        path = tmp_path / "a.bf"
        path.write_text(PRINT_A)
        feed_stdin(monkeypatch, f"load {path}\nrun\n")
        assert main(["--mode", "interactive", "--speed", "1000"]) == 0
        assert "output='A'" in capsys.readouterr().out


class TestRunPaced:

    def test_paced_with_fake_clock(self):
        """run_paced ticks on the given clock and sleeps one delay per loop."""
        session = ControlSession.from_source("+++", speed=4)
        now = [0.0]
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            now[0] += seconds

        run_paced(session, clock=lambda: now[0], sleep=sleep)

        assert session.engine.status is Status.HALTED
        assert session.engine.tape.read() == 3
        assert session.paused is True
        assert sleeps and all(s == 0.25 for s in sleeps)

"""bfstep command line interface.

Run programs in batch or step through them interactively.

Usage:
    bfstep "++++++++[>++++++++<-]>+."
    bfstep --file hello.bf --mode dump
    echo -n "abc" | bfstep --stdin ",[.,]"
    bfstep --file hello.bf --mode interactive
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from .commands import Pause, Start
from .engine import ExecutionEngine
from .errors import InvalidCommand, LoadError
from .observability import setup_logging
from .session import ControlSession
from .state import Status

MODES = ("default", "dump", "debug", "interactive")

INTERACTIVE_HELP = """\
Commands:
    <empty line>            execute one instruction
    run                     step at the current speed until finished (Ctrl-C pauses)
    set ip|dp = N           move the instruction / data pointer
    set data[IDX] = V       store V in cell IDX (IDX defaults to dp)
    set speed = V           steps per second
    clear data|io           zero the tape / empty the IO buffers
    restart | reset         back to ip 0 (keep tape) / rebuild everything
    load PATH               reset onto the program in PATH
    help | quit
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfstep",
        description="bfstep: steppable interpreter and debugger for the 8-instruction tape language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Print "A"
    bfstep "++++++++[>++++++++<-]>+."

    # Run a file and dump the tape afterwards
    bfstep --file hello.bf --mode dump

    # Echo standard input
    echo -n "abc" | bfstep --stdin ",[.,]"

    # Debug interactively
    bfstep --file hello.bf --mode interactive
        """
    )

    parser.add_argument(
        "code",
        nargs="?",
        help="Program source (read from standard input when neither code nor --file is given)"
    )
    parser.add_argument(
        "--file", "-f",
        type=str,
        help="Path to a program file"
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Feed standard input to the program's input instruction"
    )
    parser.add_argument(
        "--input", "-i",
        type=str,
        help="Inline program input"
    )
    parser.add_argument(
        "--mode", "-m",
        choices=MODES,
        default="default",
        help="default: print output | dump: also print the tape | "
             "debug: trace every step | interactive: command-driven debugger"
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="Stop batch runs after this many cycles. Default: unlimited"
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=ControlSession.DEFAULT_SPEED,
        help=f"Interactive steps per second. Default: {ControlSession.DEFAULT_SPEED:g}"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level. Default: WARNING"
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Logging format. Default: text"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.code is not None and args.file:
        parser.error("Give either code or --file, not both")
    if args.speed <= 0:
        parser.error("--speed must be positive")

    code_from_stdin = args.code is None and not args.file and args.mode != "interactive"
    if code_from_stdin and args.stdin:
        parser.error("--stdin needs the program as an argument or --file")
    if args.mode == "interactive" and args.stdin:
        parser.error("--stdin cannot be used in interactive mode; use --input")

    setup_logging(args.log_level, args.log_format)

    if args.file:
        program_path = Path(args.file)
        if not program_path.exists():
            print(f"Error: Program file not found: {args.file}")
            return 1
        try:
            # non-UTF-8 bytes can only be comments
            source = program_path.read_bytes().decode("utf-8", errors="replace")
        except OSError as e:
            print(f"Error: Could not read {args.file}: {e}")
            return 1
    elif args.code is not None:
        source = args.code
    elif code_from_stdin:
        source = sys.stdin.read()
    else:
        source = ""

    program_input = bytearray()
    if args.input:
        program_input += args.input.encode("utf-8")
    if args.stdin:
        program_input += sys.stdin.buffer.read()

    try:
        engine = ExecutionEngine.build(source, stdin=program_input)
    except LoadError as e:
        print(f"Error: {e}")
        return 1

    if args.mode == "interactive":
        return run_interactive(ControlSession(engine, speed=args.speed))
    return run_batch(engine, args.mode, args.max_cycles)


# =============================================================================
# Batch
# =============================================================================

def run_batch(engine: ExecutionEngine, mode: str = "default", max_cycles: Optional[int] = None) -> int:
    """Step to completion, streaming output (and trace lines in debug mode)."""
    error = None
    while not engine.is_finished():
        if max_cycles is not None and engine.state.cycles >= max_cycles:
            error = f"Max cycles ({max_cycles}) exceeded"
            break
        engine.step()
        if mode == "debug":
            print(format_trace_line(engine))
        write_output(engine.io.drain_output(clear=True))

    if mode in ("dump", "debug"):
        summary = engine.get_summary()
        print()
        print("============")
        print("--- DATA ---")
        print(engine.tape.cells())
        print(f"Cycles: {summary['cycles']}")
        print(f"Status: {summary['status']}")

    if error is not None:
        print(f"Error: {error}")
        return 1
    if engine.status is Status.ERRORED:
        ip, kind, tape = engine.failure()
        print(f"Error: {kind} at instruction {ip} (dp={tape['dp']}): {engine.state.error_message}")
        return 1
    return 0


def write_output(data: bytes) -> None:
    """Write raw program output bytes to standard output."""
    if not data:
        return
    sys.stdout.flush()
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


def format_trace_line(engine: ExecutionEngine, snap: Optional[dict] = None) -> str:
    """One debug line: cycle, cell under dp and the next instruction.

    Reads the live engine state unless a trace snapshot is given.
    """
    if snap is None:
        state = engine.state
        ip, dp, cell, cycles = state.ip, state.tape.pointer, state.tape.read(), state.cycles
    else:
        ip, dp, cycles = snap["ip"], snap["dp"], snap["cycles"]
        cell = snap["tape"][dp]
    instruction = engine.program.instruction_at(ip)
    if instruction is not None:
        instr_text = instruction.name
    else:
        instr_text = f"<end+{ip - len(engine.program)}>"
    return f"{cycles}: data(*{dp}={cell}) instr(*{ip}={instr_text})"


# =============================================================================
# Interactive
# =============================================================================

def format_status(session: ControlSession) -> str:
    """Single-line view of the session snapshot."""
    snap = session.snapshot()
    dp = snap["dp"]
    status = snap["status"]
    if snap["error"]:
        status = f"{status}({snap['error']})"
    output = snap["output"].decode("utf-8", errors="replace")
    return (
        f"ip={snap['ip']}/{len(session.engine.program)} dp={dp} cell={snap['tape'][dp]} "
        f"status={status} cycles={snap['cycles']} speed={snap['speed']:g} "
        f"input={snap['pending_input']} output={output!r}"
    )


def run_paced(session: ControlSession, clock=time.monotonic, sleep=time.sleep) -> None:
    """Step at the session's speed until finished, quit or interrupted."""
    session.apply(Start())
    try:
        while session.active and not session.engine.is_finished():
            session.tick(clock())
            sleep(session.delay)
    except KeyboardInterrupt:
        print()
    finally:
        if session.active:
            session.apply(Pause())


def run_interactive(session: ControlSession) -> int:
    """Line-driven debugger loop reading commands from standard input."""
    print(INTERACTIVE_HELP)
    print(format_status(session))

    for line in sys.stdin:
        line = line.strip()
        try:
            if not line:
                session.step()
            elif line.lower() == "run":
                run_paced(session)
            elif line.lower() == "help":
                print(INTERACTIVE_HELP)
                continue
            else:
                session.execute(line)
        except InvalidCommand as e:
            print(f"Error: {e}")
            continue

        if not session.active:
            break
        print(format_status(session))

    return 1 if session.engine.status is Status.ERRORED else 0

"""bfstep Interactive Debugger.

A Gradio web interface for stepping through tape-language programs.

Usage:
    cd /path/to/bfstep
    pip install -e ".[demo]"
    python demo/gradio_app.py

Features:
    - Write or load example programs
    - Step, run at an adjustable speed, pause
    - Issue debugger commands (set ip/dp/data/speed, clear, restart, reset)
    - Watch the tape, the output and the next instruction in the source
    - Review the most recent steps
"""

import sys
import time
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import gradio as gr
from bfstep import ControlSession, InvalidCommand, LoadError
from bfstep.cli import format_status
from bfstep.commands import Pause, Reset, Start, Step


# =============================================================================
# Example Programs
# =============================================================================

EXAMPLE_PROGRAMS = {
    "Print A": "++++++++[>++++++++<-]>+.   prints A (65)",

    "Hello World": (
        "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
        ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
    ),

    "Echo": ",[.,]   copy input to output until end of input",

    "Tape underflow": "+<   moves left of cell 0",

    "Custom": ""
}

TICK_SECONDS = 0.02
TAPE_WINDOW = 16
RECENT_STEPS = 8


# =============================================================================
# Rendering
# =============================================================================

def render_tape(session: ControlSession) -> str:
    """Cells around the data pointer, the current cell bracketed."""
    snap = session.snapshot()
    dp = snap["dp"]
    tape = snap["tape"]
    start = max(0, dp - TAPE_WINDOW // 2)
    end = min(len(tape), start + TAPE_WINDOW)

    index_cells = []
    value_cells = []
    for i in range(start, end):
        index_cells.append(f"{i:>5}")
        value = f"[{tape[i]}]" if i == dp else str(tape[i])
        value_cells.append(f"{value:>5}")

    lines = [
        "index " + "".join(index_cells),
        "value " + "".join(value_cells),
        f"({len(tape)} cells allocated)",
    ]
    return "\n".join(lines)


def render_source(session: ControlSession) -> str:
    """Program source with the next instruction marked."""
    source = session.engine.program.source
    position = session.snapshot()["next_position"]
    if position is None:
        return source + "  <end>"
    return source[:position] + "▶" + source[position:]


def render_recent_steps(session: ControlSession) -> str:
    """Most recent trace entries, newest last."""
    lines = []
    for entry in session.engine.trace:
        line = f"{entry.cycle:>6}  ip={entry.ip:<4} {entry.instruction}"
        if entry.error:
            line += f"  ! {entry.error}"
        lines.append(line)
    return "\n".join(lines)


def render(session: ControlSession, message: str = "") -> tuple:
    output = session.engine.io.peek_output().decode("utf-8", errors="replace")
    return (
        session,
        format_status(session),
        render_source(session),
        render_tape(session),
        render_recent_steps(session),
        output,
        message,
    )


def empty_outputs(message: str) -> tuple:
    return None, "", "", "", "", "", message


# =============================================================================
# Event Handlers
# =============================================================================

def load_program(source: str, program_input: str, speed: float) -> tuple:
    """Build a fresh paused session for the given program."""
    try:
        session = ControlSession.from_source(
            source,
            stdin=program_input or None,
            speed=speed or ControlSession.DEFAULT_SPEED,
            trace=True,
            trace_limit=RECENT_STEPS,
        )
    except (LoadError, ValueError) as e:
        return empty_outputs(f"Error: {e}")
    return render(session, f"Loaded {len(session.engine.program)} instructions")


def run_command(session: ControlSession, command_text: str) -> tuple:
    """Apply one typed debugger command."""
    if session is None:
        return empty_outputs("Load a program first")
    try:
        session.execute(command_text)
    except InvalidCommand as e:
        return render(session, f"Error: {e}")
    return render(session, f"OK: {command_text}")


def apply_button(command):
    def handler(session: ControlSession) -> tuple:
        if session is None:
            return empty_outputs("Load a program first")
        try:
            session.apply(command)
        except InvalidCommand as e:
            return render(session, f"Error: {e}")
        return render(session)
    return handler


def on_tick(session: ControlSession) -> tuple:
    """Timer callback: let the session take a step if one is due."""
    if session is None:
        return empty_outputs("")
    result = session.tick(time.monotonic())
    if result is not None and not result.running:
        session.apply(Pause())
        return render(session, f"Finished: {result.status.value}")
    return render(session)


def load_example(example_name: str) -> str:
    """Load an example program."""
    return EXAMPLE_PROGRAMS.get(example_name, "")


# =============================================================================
# Gradio Interface
# =============================================================================

def create_demo():
    """Create and return the Gradio debugger interface."""

    with gr.Blocks(title="bfstep Debugger", theme=gr.themes.Soft()) as demo:
        gr.Markdown("""
        # bfstep: Interactive Tape Debugger

        Step through a program one instruction at a time, or let it run at a
        chosen speed. Between steps, type commands to inspect and change the state.
        """)

        session_state = gr.State(None)
        timer = gr.Timer(TICK_SECONDS)

        with gr.Row():
            with gr.Column(scale=2):
                gr.Markdown("### Program")

                example_dropdown = gr.Dropdown(
                    choices=list(EXAMPLE_PROGRAMS.keys()),
                    value="Print A",
                    label="Load Example"
                )
                program_source = gr.Textbox(
                    value=EXAMPLE_PROGRAMS["Print A"],
                    label="Source Code",
                    lines=8,
                    placeholder="Enter a program here..."
                )
                program_input = gr.Textbox(label="Program Input", lines=1)
                speed = gr.Number(
                    value=ControlSession.DEFAULT_SPEED,
                    minimum=0.1,
                    label="Speed (steps per second)"
                )
                load_button = gr.Button("Load", variant="primary")

                with gr.Row():
                    step_button = gr.Button("Step")
                    start_button = gr.Button("Start")
                    pause_button = gr.Button("Pause")
                    reset_button = gr.Button("Reset")

                command_box = gr.Textbox(
                    label="Command",
                    placeholder="set data[2] = 65"
                )

            with gr.Column(scale=3):
                status_box = gr.Textbox(label="State", interactive=False)
                source_view = gr.Textbox(label="Next Instruction", lines=4, interactive=False)
                tape_view = gr.Textbox(label="Tape", lines=3, interactive=False)
                recent_view = gr.Textbox(label="Recent Steps", lines=RECENT_STEPS, interactive=False)
                output_view = gr.Textbox(label="Output", lines=4, interactive=False)
                message_box = gr.Textbox(label="Messages", interactive=False)

        with gr.Accordion("Command Reference", open=False):
            gr.Markdown("""
            | Command | Effect |
            |---------|--------|
            | `set ip = N` | Move the instruction pointer (0..program length) |
            | `set dp = N` | Move the data pointer, growing the tape |
            | `set data[IDX] = V` | Store V (0..255) in cell IDX (default: dp) |
            | `set speed = V` | Steps per second |
            | `clear data` / `clear io` | Zero the tape / empty input and output |
            | `restart` | ip = 0, dp = 0, tape and IO kept |
            | `reset` | Fresh tape and IO, same program |
            | `start` / `pause` / `step` | Control paced execution |
            | `quit` | End the session |
            """)

        outputs = [session_state, status_box, source_view, tape_view, recent_view, output_view, message_box]

        example_dropdown.change(
            fn=load_example,
            inputs=[example_dropdown],
            outputs=[program_source]
        )
        load_button.click(
            fn=load_program,
            inputs=[program_source, program_input, speed],
            outputs=outputs
        )
        command_box.submit(
            fn=run_command,
            inputs=[session_state, command_box],
            outputs=outputs
        )
        step_button.click(fn=apply_button(Step()), inputs=[session_state], outputs=outputs)
        start_button.click(fn=apply_button(Start()), inputs=[session_state], outputs=outputs)
        pause_button.click(fn=apply_button(Pause()), inputs=[session_state], outputs=outputs)
        reset_button.click(fn=apply_button(Reset()), inputs=[session_state], outputs=outputs)
        timer.tick(fn=on_tick, inputs=[session_state], outputs=outputs)

    return demo


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7861,
        show_error=True
    )

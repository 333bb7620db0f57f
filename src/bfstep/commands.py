"""Interactive command protocol.

Command text is parsed once, at the boundary, into one of the frozen
command types below; everything past parse_command() works on these
types only.

Grammar (keywords are case-insensitive):
    set (instruction pointer | ip) = <int>
    set (data pointer | dp) = <int>
    set (data | d) [<index>] = <int>      also: set data <index> = <int>
    set speed = <number>
    clear (data | io)
    restart | reset | quit | start | pause | step
    load <path>

Integers accept an optional sign and the prefixes 0x, 0o, 0b or a
trailing h for hexadecimal (e.g. 0x41, 41h, 0b1000001).
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from .errors import InvalidCommand


@dataclass(frozen=True)
class SetInstructionPointer:
    index: int


@dataclass(frozen=True)
class SetDataPointer:
    index: int


@dataclass(frozen=True)
class SetData:
    """Store value in a cell; index None means the cell under dp."""
    value: int
    index: Optional[int] = None


@dataclass(frozen=True)
class SetSpeed:
    speed: float


@dataclass(frozen=True)
class ClearData:
    pass


@dataclass(frozen=True)
class ClearIO:
    pass


@dataclass(frozen=True)
class Restart:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Step:
    pass


@dataclass(frozen=True)
class Load:
    path: str


Command = Union[
    SetInstructionPointer, SetDataPointer, SetData, SetSpeed,
    ClearData, ClearIO, Restart, Reset, Quit, Start, Pause, Step, Load,
]

SET_TARGETS = ("instruction pointer", "ip", "data pointer", "dp", "data", "d", "speed")

_SIMPLE_COMMANDS = {
    "restart": Restart,
    "reset": Reset,
    "quit": Quit,
    "start": Start,
    "pause": Pause,
    "step": Step,
}

_CLEAR_COMMANDS = {
    "data": ClearData,
    "io": ClearIO,
}

_COMMAND_RE = re.compile(r"^(?P<keyword>\S+)\s*(?P<rest>.*)$", re.DOTALL)

_SET_RE = re.compile(
    r"""
    ^(?P<target>instruction\s+pointer|ip|data\s+pointer|dp|data|d|speed)
    (?:\s*\[\s*(?P<index>[^\]]*?)\s*\]|\s+(?P<bare_index>[^\s=]+))?
    \s*=\s*
    (?P<value>.*?)\s*$
    """,
    re.IGNORECASE | re.VERBOSE,
)

_INT_RE = re.compile(
    r"^(?P<sign>[+-]?)(?:0x(?P<hex>[0-9a-f]+)|0o(?P<oct>[0-7]+)|0b(?P<bin>[01]+)"
    r"|(?P<hsuffix>[0-9a-f]+)h|(?P<dec>[0-9]+))$",
    re.IGNORECASE,
)

_DECIMAL_RE = re.compile(r"^\+?(?:[0-9]+\.?[0-9]*|\.[0-9]+)$")


def parse_int(text: str) -> int:
    """Parse an integer literal in any supported radix.

    Raises:
        InvalidCommand: If text is not an integer literal
    """
    match = _INT_RE.match(text.strip())
    if match is None:
        raise InvalidCommand(f"not a valid number: '{text}'")

    if match.group("hex"):
        value = int(match.group("hex"), 16)
    elif match.group("oct"):
        value = int(match.group("oct"), 8)
    elif match.group("bin"):
        value = int(match.group("bin"), 2)
    elif match.group("hsuffix"):
        value = int(match.group("hsuffix"), 16)
    else:
        value = int(match.group("dec"), 10)

    return -value if match.group("sign") == "-" else value


def parse_speed(text: str) -> float:
    """Parse a speed: any integer literal or a plain decimal like 2.5.

    Raises:
        InvalidCommand: If text is not a number or does not fit a float
    """
    try:
        value = parse_int(text)
    except InvalidCommand:
        if not _DECIMAL_RE.match(text.strip()):
            raise
        return float(text)
    try:
        return float(value)
    except OverflowError:
        raise InvalidCommand(f"speed out of range: '{text}'") from None


def parse_command(text: str) -> Command:
    """Parse one line of command text.

    Args:
        text: Raw command line

    Returns:
        The parsed command

    Raises:
        InvalidCommand: If the text does not form a complete, valid command
    """
    match = _COMMAND_RE.match(text.strip())
    if match is None:
        raise InvalidCommand("empty command")

    keyword = match.group("keyword").lower()
    rest = match.group("rest").strip()

    if keyword in _SIMPLE_COMMANDS:
        if rest:
            raise InvalidCommand(f"'{keyword}' takes no arguments")
        return _SIMPLE_COMMANDS[keyword]()

    if keyword == "clear":
        specifier = rest.lower()
        if specifier not in _CLEAR_COMMANDS:
            raise InvalidCommand(f"unknown clear specifier '{rest}' (expected data or io)")
        return _CLEAR_COMMANDS[specifier]()

    if keyword == "load":
        if not rest:
            raise InvalidCommand("expected file name")
        return Load(rest)

    if keyword == "set":
        return _parse_set(rest)

    raise InvalidCommand(f"unknown command '{match.group('keyword')}'")


def _parse_set(rest: str) -> Command:
    if not rest:
        raise InvalidCommand("variable name required")

    match = _SET_RE.match(rest)
    if match is None:
        first = rest.split()[0].split("=")[0].split("[")[0].lower()
        if first not in {target.split()[0] for target in SET_TARGETS}:
            raise InvalidCommand(f"unknown variable '{first}'")
        raise InvalidCommand("expecting = followed by a value")

    target = " ".join(match.group("target").lower().split())
    raw_index = match.group("index")
    if raw_index is None:
        raw_index = match.group("bare_index")
    raw_value = match.group("value")
    if not raw_value:
        raise InvalidCommand("expecting value")

    if target in ("data", "d"):
        index = None
        if raw_index is not None:
            if not raw_index:
                raise InvalidCommand("expecting index")
            index = parse_int(raw_index)
        return SetData(value=parse_int(raw_value), index=index)

    if raw_index is not None:
        raise InvalidCommand(f"'{target}' does not take an index")

    if target in ("instruction pointer", "ip"):
        return SetInstructionPointer(parse_int(raw_value))
    if target in ("data pointer", "dp"):
        return SetDataPointer(parse_int(raw_value))
    return SetSpeed(parse_speed(raw_value))

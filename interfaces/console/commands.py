from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence


@dataclass
class Command:
    name: str
    args: List[str] = field(default_factory=list)


def parse_command(line: str) -> Command:
    """
    Split a console line into a command and its arguments.

    Format: [/]name arg1 arg2 ...  (a leading slash is accepted)
    """

    parts = line.strip().split()
    if not parts:
        raise ValueError("Empty command")

    name = parts[0].lstrip("/").lower()
    if not name:
        raise ValueError(f"Invalid command: {line!r}")
    return Command(name=name, args=parts[1:])


def parse_tiles(args: Sequence[str]) -> List[int]:
    """
    Parse a board given as numbers separated by spaces and/or commas.
    """

    values = [v for arg in args for v in arg.split(",") if v]
    if not values:
        raise ValueError("Please enter the tiles, e.g. 1 2 3 ... 15 0")
    try:
        return [int(v) for v in values]
    except ValueError:
        raise ValueError(f"Tiles must be numbers: {' '.join(args)}") from None


def format_board(tiles: Sequence[int], width: int = 4) -> str:
    rows = []
    for start in range(0, len(tiles), width):
        row = tiles[start:start + width]
        rows.append(" ".join(f"{t:>2}" if t else " ." for t in row))
    return "\n".join(rows)

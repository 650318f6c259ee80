"""Solution ledger: which piece file sits at each grid position, and how rotated."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from .codec import piece_file_name
from .errors import MalformedLedgerError
from .transform import ROTATIONS

PathLike = Union[str, Path]

_PIECE_TOKEN = re.compile(r"^(?:p(\d+)\.pbm|(\d+))$")


@dataclass(frozen=True)
class LedgerEntry:
    """One ledger line.

    ``angle`` is the counterclockwise rotation to apply to the piece file
    before placing it. ``position`` is the canonical row-major position when
    the line states it explicitly; otherwise the line number decides.
    ``line_number`` records where a parsed entry came from.
    """

    file_id: int
    angle: int
    position: Optional[int] = None
    line_number: Optional[int] = field(default=None, compare=False)

    @property
    def file_name(self) -> str:
        return piece_file_name(self.file_id)

    def to_line(self, *, explicit_position: bool = False) -> str:
        line = f"{self.file_name} {self.angle}"
        if explicit_position and self.position is not None:
            line += f" {self.position}"
        return line

    def to_dict(self) -> dict:
        return {
            "file_id": self.file_id,
            "file_name": self.file_name,
            "angle": self.angle,
            "position": self.position,
        }


def _parse_file_id(token: str, line_number: int) -> int:
    match = _PIECE_TOKEN.match(token)
    if match is None:
        raise MalformedLedgerError(f"unreadable piece identifier {token!r}", line_number=line_number)
    if match.group(2) is not None:
        return int(match.group(2))
    file_id = int(match.group(1))
    if token != piece_file_name(file_id):
        raise MalformedLedgerError(
            f"piece file {token!r} does not follow the {piece_file_name(file_id)!r} naming",
            line_number=line_number,
        )
    return file_id


def _parse_int(token: str, what: str, line_number: int) -> int:
    try:
        return int(token)
    except ValueError:
        raise MalformedLedgerError(f"unreadable {what} {token!r}", line_number=line_number) from None


def parse_line(line: str, line_number: int) -> LedgerEntry:
    tokens = line.split()
    if len(tokens) not in (2, 3):
        raise MalformedLedgerError(
            f"expected '<piece> <angle> [<position>]', got {line.strip()!r}",
            line_number=line_number,
        )
    file_id = _parse_file_id(tokens[0], line_number)
    angle = _parse_int(tokens[1], "rotation", line_number)
    if angle not in ROTATIONS:
        raise MalformedLedgerError(f"rotation must be one of {ROTATIONS}, got {angle}", line_number=line_number)
    position = None
    if len(tokens) == 3:
        position = _parse_int(tokens[2], "position", line_number)
        if position < 0:
            raise MalformedLedgerError(f"negative position {position}", line_number=line_number)
    return LedgerEntry(file_id=file_id, angle=angle, position=position, line_number=line_number)


class SolutionLedger:
    """Ordered answer key, one entry per canonical grid position."""

    def __init__(self, entries: Optional[Sequence[LedgerEntry]] = None) -> None:
        self.entries: List[LedgerEntry] = list(entries or [])

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> LedgerEntry:
        return self.entries[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SolutionLedger):
            return NotImplemented
        return self.entries == other.entries

    def append(self, entry: LedgerEntry) -> None:
        self.entries.append(entry)

    def placements(self) -> Iterator[tuple]:
        """Yield ``(position, entry)``; legacy lines take their line order."""

        for index, entry in enumerate(self.entries):
            yield (index if entry.position is None else entry.position), entry

    @property
    def file_ids(self) -> List[int]:
        return [entry.file_id for entry in self.entries]

    def format(self, *, explicit_positions: bool = False) -> str:
        return "".join(entry.to_line(explicit_position=explicit_positions) + "\n" for entry in self.entries)

    def write(self, path: PathLike, *, explicit_positions: bool = False) -> Path:
        target = Path(path)
        target.write_text(self.format(explicit_positions=explicit_positions), encoding="utf-8")
        return target

    @classmethod
    def parse(cls, text: str) -> "SolutionLedger":
        entries: List[LedgerEntry] = []
        for line_number, raw in enumerate(text.splitlines(), start=1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            entries.append(parse_line(line, line_number))
        return cls(entries)

    @classmethod
    def read(cls, path: PathLike) -> "SolutionLedger":
        source = Path(path)
        try:
            text = source.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except UnicodeDecodeError as exc:
            raise MalformedLedgerError(f"{source} is not a text file") from exc
        except OSError as exc:
            raise MalformedLedgerError(f"cannot read {source}: {exc.strerror or exc}") from exc
        return cls.parse(text)

    def to_dict(self) -> List[dict]:
        return [entry.to_dict() for entry in self.entries]


def assign_pieces(piece_count: int, rng: random.Random) -> SolutionLedger:
    """Draw file identifiers and rotations for every canonical position.

    File identifiers are a shuffled copy of ``range(piece_count)``; rotations
    are drawn afterwards, one per position in row-major order.
    """

    file_ids = list(range(piece_count))
    rng.shuffle(file_ids)
    ledger = SolutionLedger()
    for position, file_id in enumerate(file_ids):
        angle = ROTATIONS[rng.randrange(len(ROTATIONS))]
        ledger.append(LedgerEntry(file_id=file_id, angle=angle, position=position))
    return ledger


__all__ = ["LedgerEntry", "SolutionLedger", "assign_pieces", "parse_line"]

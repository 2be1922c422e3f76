from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


# Sentinel returned by the search when there is nothing to play
NO_MOVE: Tuple[int, int] = (-1, -1)


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (int): Origin square index (0-based).
        to_sq (int): Destination square index (0-based).
    """

    from_sq: int
    to_sq: int

    @classmethod
    def from_pair(cls, pair: Tuple[int, int]) -> "Move":
        return cls(pair[0], pair[1])

    def as_pair(self) -> Tuple[int, int]:
        return (self.from_sq, self.to_sq)

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"``.
        """
        return square_to_str(self.from_sq) + square_to_str(self.to_sq)


def parse_uci(uci: str) -> Move:
    """Parse a UCI move string.

    Args:
        uci (str): Move encoded in long algebraic notation (e.g. ``"e2e4"``).

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length or squares. Promotion
            suffixes are rejected since pawns are never promoted.
    """
    if len(uci) == 5:
        raise ValueError(f"promotion is not supported: {uci!r}")
    if len(uci) != 4:
        raise ValueError(f"invalid UCI move length: {uci!r}")
    return Move(str_to_square(uci[0:2]), str_to_square(uci[2:4]))


def parse_coordinates(text: str) -> Move:
    """Parse human input such as ``"e2 e4"`` or ``"e2e4"``.

    Raises:
        ValueError: If the text does not name two squares.
    """
    parts = text.split()
    if len(parts) == 2:
        return Move(str_to_square(parts[0]), str_to_square(parts[1]))
    if len(parts) == 1:
        return parse_uci(parts[0])
    raise ValueError(f"expected two squares like 'e2 e4', got {text!r}")


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Zero-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1]) - 1
    return rank * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Args:
        idx (int): Square index in range 0..63.

    Returns:
        str: Algebraic notation for ``idx``.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    file = idx % 8
    rank = idx // 8
    return chr(ord("a") + file) + str(rank + 1)

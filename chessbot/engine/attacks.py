"""Precomputed leaper attack tables.

Each table holds 64 bitmasks indexed by origin square (a1=0 .. h8=63). Entries
depend only on the origin's file and rank, never on board occupancy, so they
are built once at import and shared by every Board.
"""

from __future__ import annotations

from typing import Final, Iterable, Tuple


KNIGHT_OFFSETS: Final = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
KING_OFFSETS: Final = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))


def _leaper_table(offsets: Iterable[Tuple[int, int]]) -> Tuple[int, ...]:
    offsets = tuple(offsets)
    table = []
    for sq in range(64):
        f = sq % 8
        r = sq // 8
        mask = 0
        for df, dr in offsets:
            tf = f + df
            tr = r + dr
            if 0 <= tf < 8 and 0 <= tr < 8:
                mask |= 1 << (tr * 8 + tf)
        table.append(mask)
    return tuple(table)


KNIGHT_ATTACKS: Final = _leaper_table(KNIGHT_OFFSETS)
KING_ATTACKS: Final = _leaper_table(KING_OFFSETS)
# Squares a pawn standing on the index square captures onto
WHITE_PAWN_ATTACKS: Final = _leaper_table(((-1, 1), (1, 1)))
BLACK_PAWN_ATTACKS: Final = _leaper_table(((-1, -1), (1, -1)))


def pawn_attacks(white: bool) -> Tuple[int, ...]:
    return WHITE_PAWN_ATTACKS if white else BLACK_PAWN_ATTACKS


def iter_bits(bb: int) -> Iterable[int]:
    """Yield set square indices of ``bb`` in ascending order."""
    while bb:
        lsb = bb & -bb
        yield lsb.bit_length() - 1
        bb ^= lsb


def lsb_square(bb: int) -> int:
    """Return the lowest set square of ``bb`` (``bb`` must be non-zero)."""
    return (bb & -bb).bit_length() - 1

"""Static evaluation: material plus piece-square tables.

Pure, deterministic, and side-effect free.
"""

from __future__ import annotations

from typing import Final, Tuple

from chessbot.engine.attacks import iter_bits
from chessbot.engine.board import Board, Color, Piece, PieceType


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900
K_VAL: Final = 20000

PIECE_VALUES: Final = (P_VAL, N_VAL, B_VAL, R_VAL, Q_VAL, K_VAL)


# Mid-game piece-square tables (white perspective, a1 first), centipawns
# fmt: off
PSQT_P: Final = (
      0,   0,   0,   0,   0,   0,   0,   0,
      5,  10,  10, -20, -20,  10,  10,   5,
      5,  -5, -10,   0,   0, -10,  -5,   5,
      0,   0,   0,  20,  20,   0,   0,   0,
      5,   5,  10,  25,  25,  10,   5,   5,
     10,  10,  20,  30,  30,  20,  10,  10,
     50,  50,  50,  50,  50,  50,  50,  50,
      0,   0,   0,   0,   0,   0,   0,   0,
)

PSQT_N: Final = (
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20,   0,   0,   0,   0, -20, -40,
    -30,   0,  10,  15,  15,  10,   0, -30,
    -30,   5,  15,  20,  20,  15,   5, -30,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  10,  15,  15,  10,   5, -30,
    -40, -20,   0,   5,   5,   0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
)

PSQT_B: Final = (
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10,   5,   0,   0,   0,   0,   5, -10,
    -10,  10,  10,  10,  10,  10,  10, -10,
    -10,   0,  10,  10,  10,  10,   0, -10,
    -10,   5,   5,  10,  10,   5,   5, -10,
    -10,   0,   5,  10,  10,   5,   0, -10,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
)

PSQT_R: Final = (
      0,   0,   5,  10,  10,   5,   0,   0,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
      5,  10,  10,  10,  10,  10,  10,   5,
      0,   0,   0,   0,   0,   0,   0,   0,
)

PSQT_Q: Final = (
    -20, -10, -10,  -5,  -5, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,   5,   5,   5,   0, -10,
     -5,   0,   5,   5,   5,   5,   0,  -5,
     -5,   0,   5,   5,   5,   5,   0,  -5,
    -10,   0,   5,   5,   5,   5,   0, -10,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -20, -10, -10,  -5,  -5, -10, -10, -20,
)

PSQT_K: Final = (
     20,  30,  10,   0,   0,  10,  30,  20,
     20,  20,   0,   0,   0,   0,  20,  20,
    -10, -20, -20, -20, -20, -20, -20, -10,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
)
# fmt: on

PSQT: Final[Tuple[Tuple[int, ...], ...]] = (PSQT_P, PSQT_N, PSQT_B, PSQT_R, PSQT_Q, PSQT_K)


def _mirror_sq(sq: int) -> int:
    # Flip vertically (rank mirror)
    return sq ^ 56


def material_score(board: Board) -> int:
    """Material balance in centipawns, White minus Black."""
    score = 0
    for kind in PieceType:
        value = PIECE_VALUES[kind]
        score += board.bb[Piece.of(Color.WHITE, kind)].bit_count() * value
        score -= board.bb[Piece.of(Color.BLACK, kind)].bit_count() * value
    return score


def positional_score(board: Board) -> int:
    """Piece-square balance, White minus Black; Black reads mirrored squares."""
    score = 0
    for kind in PieceType:
        table = PSQT[kind]
        for sq in iter_bits(board.bb[Piece.of(Color.WHITE, kind)]):
            score += table[sq]
        for sq in iter_bits(board.bb[Piece.of(Color.BLACK, kind)]):
            score -= table[_mirror_sq(sq)]
    return score


def evaluate(board: Board) -> int:
    """Return material + PSQT in centipawns from the side to move's view."""
    score = material_score(board) + positional_score(board)
    return score if board.side_to_move is Color.WHITE else -score

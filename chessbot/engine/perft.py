from __future__ import annotations

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Count leaf positions ``depth`` plies below ``board``.

    ``perft(b, 0) == 1``. Each legal child is entered with ``applied_move`` on
    ``board`` itself, so the board is back in its original state on return.
    At depth 1 the legal move list is counted without playing the moves.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = board.generate_all_legal_moves()
    if depth == 1:
        return len(moves)

    nodes = 0
    for from_sq, to_sq in moves:
        with board.applied_move(from_sq, to_sq):
            nodes += perft(board, depth - 1)
    return nodes

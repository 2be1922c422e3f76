from __future__ import annotations

from chessbot.engine.board import Board, Color
from chessbot.engine.move import str_to_square


def _sq(name: str) -> int:
    return str_to_square(name)


def test_white_single_and_double_push_from_home_rank() -> None:
    b = Board()
    assert b.pawn_moves(_sq("e2"), Color.WHITE) == [_sq("e3"), _sq("e4")]
    assert b.pseudo_legal_targets(_sq("e2")) == [_sq("e3"), _sq("e4")]


def test_black_pushes_toward_lower_ranks() -> None:
    b = Board.from_fen("4k3/4p3/8/8/8/8/8/4K3 b - - 0 1")
    assert b.pawn_moves(_sq("e7"), Color.BLACK) == [_sq("e6"), _sq("e5")]


def test_double_push_needs_both_squares_empty() -> None:
    b = Board.from_fen("4k3/8/8/8/4p3/8/4P3/4K3 w - - 0 1")
    assert b.pawn_moves(_sq("e2"), Color.WHITE) == [_sq("e3")]
    b = Board.from_fen("4k3/8/8/8/8/4n3/4P3/4K3 w - - 0 1")
    assert b.pawn_moves(_sq("e2"), Color.WHITE) == []


def test_no_double_push_off_home_rank() -> None:
    b = Board.from_fen("4k3/8/8/8/8/4P3/8/4K3 w - - 0 1")
    assert b.pawn_moves(_sq("e3"), Color.WHITE) == [_sq("e4")]


def test_diagonal_captures_only_onto_enemy_pieces() -> None:
    b = Board.from_fen("4k3/8/8/3p1N2/4P3/8/8/4K3 w - - 0 1")
    # d5 holds an enemy pawn, f5 a friendly knight
    assert b.pawn_moves(_sq("e4"), Color.WHITE) == [_sq("e5"), _sq("d5")]


def test_edge_file_pawn_captures_do_not_wrap() -> None:
    b = Board.from_fen("4k3/8/8/8/8/p6p/P7/4K3 w - - 0 1")
    assert b.pawn_moves(_sq("a2"), Color.WHITE) == []


def test_pawn_on_last_rank_is_not_promoted_and_cannot_move() -> None:
    b = Board.from_fen("7k/P7/8/8/8/8/8/4K3 w - - 0 1")
    rec = b.make_move(_sq("a7"), _sq("a8"))
    assert b.get_piece_at_square(_sq("a8")) == "P"
    assert b.pawn_moves(_sq("a8"), Color.WHITE) == []
    b.unmake_move(rec)
    assert b.get_piece_at_square(_sq("a7")) == "P"


def test_dispatch_rejects_pieces_of_side_not_to_move() -> None:
    b = Board()
    assert b.pseudo_legal_targets(_sq("e7")) == []
    assert b.pseudo_legal_targets(_sq("e4")) == []
    assert b.pseudo_legal_targets(_sq("g1")) == [_sq("f3"), _sq("h3")]

from __future__ import annotations

from chessbot.engine.board import BP, Board, Color, STARTPOS_FEN
from chessbot.engine.move import str_to_square


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w - - 0 1"


def _assert_disjoint(b: Board) -> None:
    seen = 0
    for bb in b.bb:
        assert seen & bb == 0
        seen |= bb


def test_make_unmake_restores_position() -> None:
    b = Board()
    before = (list(b.bb), b.side_to_move)
    rec = b.make_move(str_to_square("e2"), str_to_square("e4"))
    assert b.side_to_move is Color.BLACK
    assert b.get_piece_at_square(str_to_square("e4")) == "P"
    b.unmake_move(rec)
    assert (b.bb, b.side_to_move) == before
    assert b.to_fen() == STARTPOS_FEN


def test_capture_is_recorded_and_restored() -> None:
    b = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
    before = list(b.bb)
    rec = b.make_move(str_to_square("e4"), str_to_square("d5"))
    assert rec.captured == BP
    assert rec.prev_side is Color.WHITE
    assert b.bb[BP] == 0
    _assert_disjoint(b)
    b.unmake_move(rec)
    assert b.bb == before
    assert b.side_to_move is Color.WHITE


def test_every_legal_move_round_trips() -> None:
    b = Board.from_fen(KIWIPETE)
    snapshot = (list(b.bb), b.side_to_move)
    for from_sq, to_sq in b.generate_all_legal_moves():
        rec = b.make_move(from_sq, to_sq)
        _assert_disjoint(b)
        assert b.side_to_move is Color.BLACK
        b.unmake_move(rec)
        assert (b.bb, b.side_to_move) == snapshot


def test_nested_records_unwind_in_order() -> None:
    b = Board()
    snapshot = list(b.bb)
    r1 = b.make_move(str_to_square("e2"), str_to_square("e4"))
    r2 = b.make_move(str_to_square("d7"), str_to_square("d5"))
    r3 = b.make_move(str_to_square("e4"), str_to_square("d5"))
    b.unmake_move(r3)
    b.unmake_move(r2)
    b.unmake_move(r1)
    assert b.bb == snapshot
    assert b.side_to_move is Color.WHITE


def test_applied_move_reverts_on_exception() -> None:
    b = Board()
    snapshot = list(b.bb)
    try:
        with b.applied_move(str_to_square("g1"), str_to_square("f3")):
            assert b.get_piece_at_square(str_to_square("f3")) == "N"
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert b.bb == snapshot
    assert b.side_to_move is Color.WHITE

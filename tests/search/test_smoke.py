from __future__ import annotations

from chessbot.engine.board import Board
from chessbot.engine.game import Game
from chessbot.search.service import SearchService


def test_search_returns_legal_move_at_depth_3_startpos() -> None:
    game = Game.new()
    service = SearchService()

    res = service.search(game, depth=3)
    assert res.best_move is not None
    assert res.best_move in game.legal_moves(), "best move must be legal"
    assert res.depth == 3
    assert res.nodes > 0
    assert not res.mate
    # Search must hand the board back untouched
    assert game.board == Board()
    assert game.history == []


def test_search_returns_legal_move_at_depth_2_midgame() -> None:
    fen = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w - - 0 1"
    game = Game.from_fen(fen)
    service = SearchService()

    res = service.search(game, depth=2)
    assert res.best_move is not None
    assert res.best_move in game.legal_moves(), "best move must be legal"
    assert game.to_fen() == fen


def test_search_reports_each_iteration() -> None:
    seen = []
    res = SearchService().search(Game.new(), depth=2, on_iter=seen.append)
    assert [i.depth for i in seen] == [1, 2]
    assert [i.depth for i in res.iters] == [1, 2]
    assert sum(i.nodes for i in res.iters) == res.nodes
    assert res.score == res.iters[-1].score

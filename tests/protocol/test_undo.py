from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from chessbot.engine.board import STARTPOS_FEN
from chessbot.protocol.http.app import create_app


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())


def _new_game(client: TestClient, fen: str | None = None) -> str:
    game_id = client.post("/api/games").json()["game_id"]
    if fen is not None:
        client.post(f"/api/games/{game_id}/position", json={"fen": fen})
    return game_id


def test_undo_on_fresh_game_is_bad_request(client: TestClient) -> None:
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "no moves to undo"


def test_undo_unknown_game_is_404(client: TestClient) -> None:
    assert client.post("/api/games/nope/undo").status_code == 404


def test_undo_capture_restores_captured_pawn(client: TestClient) -> None:
    before = "4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1"
    game_id = _new_game(client, before)

    moved = client.post(f"/api/games/{game_id}/move", json={"move": "e4d5"}).json()
    assert moved["fen"] == "4k3/8/8/3P4/8/8/8/4K3 b - - 0 1"

    state = client.post(f"/api/games/{game_id}/undo").json()
    assert state["fen"] == before
    assert state["move_history"] == []
    assert state["last_move"] is None
    assert "e4d5" in state["legal_moves"]


def test_undo_steps_back_one_ply_at_a_time(client: TestClient) -> None:
    game_id = _new_game(client)
    client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    client.post(f"/api/games/{game_id}/move", json={"move": "e7e5"})

    state = client.post(f"/api/games/{game_id}/undo").json()
    assert state["move_history"] == ["e2e4"]
    assert state["last_move"] == "e2e4"
    assert state["side_to_move"] == "b"

    state = client.post(f"/api/games/{game_id}/undo").json()
    assert state["fen"] == STARTPOS_FEN


def test_undo_reverts_applied_search_move(client: TestClient) -> None:
    before = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
    game_id = _new_game(client, before)

    res = client.post(f"/api/games/{game_id}/search", json={"depth": 2, "apply": True}).json()
    assert res["best_move"] == "a1a8"
    assert res["fen"] != before

    state = client.post(f"/api/games/{game_id}/undo").json()
    assert state["fen"] == before
    assert state["checkmate"] is False
    assert state["move_history"] == []

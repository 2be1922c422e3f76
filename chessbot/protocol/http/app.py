from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    illegal_move_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import DEFAULT_MAX_GAMES, InMemorySessionStore
from ...engine.board import IllegalMoveError
from ...engine.game import Game
from ...engine.move import parse_uci
from ...engine.perft import perft as perft_nodes
from ...search.service import SearchService


logger = logging.getLogger(__name__)

MAX_SEARCH_DEPTH = 6
MAX_PERFT_DEPTH = 5


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="UCI move string, e.g., e2e4")


class SearchRequest(BaseModel):
    depth: int = Field(default=3, ge=1, le=MAX_SEARCH_DEPTH)
    apply: bool = Field(default=False, description="Play the best move on the game")


class PerftRequest(BaseModel):
    fen: str = Field(..., min_length=1)
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    last_move: Optional[str]
    move_history: list[str]


class SearchResponse(BaseModel):
    best_move: Optional[str]
    score: int
    mate: bool
    nodes: int
    depth: int
    time_ms: int
    fen: str


def create_app(max_games: int = DEFAULT_MAX_GAMES) -> FastAPI:
    app = FastAPI(title="Chessbot API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(IllegalMoveError, illegal_move_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore(max_games=max_games)

    @app.get("/healthz")
    async def healthz() -> Dict[str, Any]:
        return {"status": "ok", "games": len(store)}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game_id = store.create(Game.new())
        game = _require_game(store, game_id)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _game_state(game_id, _require_game(store, game_id))

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_game(store, game_id)
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        store.replace(game_id, game)
        return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        # IllegalMoveError is rendered by illegal_move_handler
        game.apply_move(move)
        return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    async def search(game_id: str, req: SearchRequest) -> SearchResponse:
        game = _require_game(store, game_id)
        res = SearchService().search(game, depth=req.depth)
        if req.apply and res.best_move is not None:
            game.apply_move(res.best_move)
        return SearchResponse(
            best_move=res.best_move.to_uci() if res.best_move else None,
            score=res.score,
            mate=res.mate,
            nodes=res.nodes,
            depth=res.depth,
            time_ms=res.time_ms,
            fen=game.to_fen(),
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _game_state(game_id, game)

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(game.board, req.depth), "depth": req.depth}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _game_state(game_id: str, game: Game) -> GameState:
    history = game.move_history_uci()
    status = game.status()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.board.side_to_move.value,
        legal_moves=[m.to_uci() for m in status.legal_moves],
        in_check=status.in_check,
        checkmate=status.checkmate,
        stalemate=status.stalemate,
        last_move=history[-1] if history else None,
        move_history=history,
    )

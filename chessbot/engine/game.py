from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .board import Board, MoveRecord
from .move import Move


@dataclass(frozen=True)
class GameStatus:
    """Legal moves and check/mate flags computed from one move generation."""

    legal_moves: Tuple[Move, ...]
    in_check: bool
    checkmate: bool
    stalemate: bool


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: track board state, expose legal moves, apply and undo moves.
    """

    board: Board
    history: List[MoveRecord] = field(default_factory=list)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    def legal_moves(self) -> List[Move]:
        return [Move(f, t) for f, t in self.board.generate_all_legal_moves()]

    def apply_move(self, move: Move) -> MoveRecord:
        """Play ``move``; raises ``IllegalMoveError`` and leaves the game as is
        when it is not legal."""
        record = self.board.make_move(move.from_sq, move.to_sq)
        self.history.append(record)
        return record

    def undo_move(self) -> None:
        if not self.history:
            raise ValueError("no moves to undo")
        self.board.unmake_move(self.history.pop())

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        return self.board.is_king_in_check()

    def checkmate(self) -> bool:
        return (not self.board.has_legal_moves()) and self.board.is_king_in_check()

    def stalemate(self) -> bool:
        return (not self.board.has_legal_moves()) and (not self.board.is_king_in_check())

    def status(self) -> GameStatus:
        moves = tuple(self.legal_moves())
        check = self.board.is_king_in_check()
        return GameStatus(
            legal_moves=moves,
            in_check=check,
            checkmate=not moves and check,
            stalemate=not moves and not check,
        )

    def move_history_uci(self) -> List[str]:
        return [Move(r.from_sq, r.to_sq).to_uci() for r in self.history]

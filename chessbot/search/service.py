from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from chessbot.engine.board import Board
from chessbot.engine.game import Game
from chessbot.engine.move import NO_MOVE, Move, square_to_str
from chessbot.eval import evaluate


logger = logging.getLogger(__name__)

MATE_SCORE = 99_999
INF = 100_000

MovePair = Tuple[int, int]


@dataclass
class IterationInfo:
    depth: int
    best_move: MovePair
    score: int
    nodes: int
    time_ms: int


@dataclass
class SearchStats:
    """Counters shared by one iterative-deepening run."""

    nodes: int = 0
    iters: List[IterationInfo] = field(default_factory=list)


IterCallback = Callable[[IterationInfo], None]


def order_moves(moves: List[MovePair]) -> List[MovePair]:
    """Move-ordering hook; enumeration order is kept as is."""
    return moves


def alpha_beta(
    board: Board,
    depth: int,
    alpha: int,
    beta: int,
    stats: Optional[SearchStats] = None,
) -> int:
    """Negamax alpha-beta; returns a score from the side to move's view.

    Every move applied here is reverted before returning, so ``board`` is
    unchanged on exit.
    """
    if stats is not None:
        stats.nodes += 1
    if depth == 0:
        return evaluate(board)

    moves = board.generate_all_legal_moves()
    if not moves:
        # Checkmated or stalemated
        return -MATE_SCORE if board.is_king_in_check(board.side_to_move) else 0

    for from_sq, to_sq in order_moves(moves):
        with board.applied_move(from_sq, to_sq):
            score = -alpha_beta(board, depth - 1, -beta, -alpha, stats)
        if score >= beta:
            return beta
        alpha = max(alpha, score)
    return alpha


def search_root(
    board: Board, depth: int, stats: Optional[SearchStats] = None
) -> Tuple[MovePair, Optional[int]]:
    """Score every root move at ``depth``; return the first strictly best.

    Returns ``(NO_MOVE, None)`` when the side to move has no legal move.
    """
    alpha, beta = -INF, INF
    best_move = NO_MOVE
    best_score: Optional[int] = None
    for from_sq, to_sq in order_moves(board.generate_all_legal_moves()):
        with board.applied_move(from_sq, to_sq):
            score = -alpha_beta(board, depth - 1, -beta, -alpha, stats)
        if best_score is None or score > best_score:
            best_score = score
            best_move = (from_sq, to_sq)
        alpha = max(alpha, score)
    return best_move, best_score


def find_best_move(
    board: Board,
    max_depth: int,
    *,
    stats: Optional[SearchStats] = None,
    on_iter: Optional[IterCallback] = None,
) -> MovePair:
    """Iterative deepening from depth 1 to ``max_depth`` inclusive.

    Args:
        board (Board): Position to search; restored before returning.
        max_depth (int): Deepest iteration, in plies.
        stats (Optional[SearchStats]): Receives node counts and one
            ``IterationInfo`` per completed depth.
        on_iter (Optional[IterCallback]): Called after each completed depth.

    Returns:
        Tuple[int, int]: ``(from, to)`` of the deepest iteration's best move,
            or ``NO_MOVE`` if ``max_depth < 1`` or there is no legal move.
    """
    if max_depth < 1:
        return NO_MOVE
    if stats is None:
        stats = SearchStats()

    best = NO_MOVE
    start = time.perf_counter()
    for d in range(1, max_depth + 1):
        nodes_before = stats.nodes
        move, score = search_root(board, d, stats)
        if score is None:
            return NO_MOVE
        best = move
        info = IterationInfo(
            depth=d,
            best_move=move,
            score=score,
            nodes=stats.nodes - nodes_before,
            time_ms=int((time.perf_counter() - start) * 1000),
        )
        stats.iters.append(info)
        logger.debug(
            "iteration",
            extra={
                "depth": d,
                "move": square_to_str(move[0]) + square_to_str(move[1]),
                "score": score,
                "nodes": info.nodes,
            },
        )
        if on_iter is not None:
            on_iter(info)
    return best


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: int
    mate: bool
    nodes: int
    depth: int
    time_ms: int
    iters: List[IterationInfo]


class SearchService:
    """Fixed-depth search over a game's board."""

    def search(
        self,
        game: Game,
        depth: int = 1,
        *,
        on_iter: Optional[IterCallback] = None,
    ) -> SearchResult:
        board = game.board
        stats = SearchStats()
        start = time.perf_counter()

        if not board.has_legal_moves():
            # Terminal root: report mate/stalemate without a move
            score = -MATE_SCORE if board.is_king_in_check() else 0
            return SearchResult(
                best_move=None,
                score=score,
                mate=score != 0,
                nodes=0,
                depth=0,
                time_ms=int((time.perf_counter() - start) * 1000),
                iters=[],
            )

        pair = find_best_move(board, depth, stats=stats, on_iter=on_iter)
        best_move = None if pair == NO_MOVE else Move.from_pair(pair)
        last = stats.iters[-1] if stats.iters else None
        score = last.score if last is not None else 0
        time_ms = int((time.perf_counter() - start) * 1000)

        logger.info(
            "search done",
            extra={
                "depth": len(stats.iters),
                "best_move": best_move.to_uci() if best_move else None,
                "score": score,
                "nodes": stats.nodes,
                "time_ms": time_ms,
            },
        )
        return SearchResult(
            best_move=best_move,
            score=score,
            mate=abs(score) >= MATE_SCORE,
            nodes=stats.nodes,
            depth=len(stats.iters),
            time_ms=time_ms,
            iters=stats.iters,
        )

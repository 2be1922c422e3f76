from __future__ import annotations

import argparse
import logging
from typing import Callable, List, Optional

import uvicorn

from ..engine.board import Color, IllegalMoveError
from ..engine.game import Game
from ..engine.move import NO_MOVE, Move, parse_coordinates
from ..search.service import find_best_move


logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = 3
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def clamp_difficulty(difficulty: int) -> int:
    """Search depth for a difficulty; out-of-range values use the default."""
    if MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
        return difficulty
    logger.warning(
        "invalid difficulty, using default",
        extra={"difficulty": difficulty, "default": DEFAULT_DIFFICULTY},
    )
    return DEFAULT_DIFFICULTY


def _game_over(game: Game, write: Writer) -> bool:
    board = game.board
    if board.has_legal_moves():
        if board.is_king_in_check():
            write("Check!")
        return False
    if board.is_king_in_check():
        winner = "Black" if board.side_to_move is Color.WHITE else "White"
        write(f"Checkmate. {winner} wins.")
    else:
        write("Stalemate.")
    return True


def play(
    difficulty: int = DEFAULT_DIFFICULTY,
    *,
    read: Reader = input,
    write: Writer = print,
    game: Optional[Game] = None,
) -> Game:
    """Human (White) against the engine in the terminal.

    Moves are read as ``e2 e4`` or ``e2e4``; ``exit`` quits. The engine answers
    with a search of ``difficulty`` plies.
    """
    depth = clamp_difficulty(difficulty)
    game = game if game is not None else Game.new()
    write(f"Difficulty set to {depth}.")
    write("Enter moves like 'e2 e4'. Type 'exit' to quit.")
    write(game.board.render())

    while True:
        try:
            line = read("Your move: ").strip()
        except EOFError:
            break
        if line.lower() in ("exit", "quit"):
            write("Exiting the game. Goodbye!")
            break
        try:
            move = parse_coordinates(line)
            game.apply_move(move)
        except IllegalMoveError as e:
            write(f"Illegal move ({e}), try again.")
            continue
        except ValueError as e:
            write(f"Could not read move: {e}")
            continue

        write(f"You played: {move.to_uci()}")
        write(game.board.render())
        if _game_over(game, write):
            break

        pair = find_best_move(game.board, depth)
        if pair == NO_MOVE:
            break
        reply = Move.from_pair(pair)
        game.apply_move(reply)
        write(f"Engine played: {reply.to_uci()}")
        write(game.board.render())
        if _game_over(game, write):
            break
    return game


def serve(host: str, port: int) -> None:
    uvicorn.run("chessbot.protocol.http.app:create_app", factory=True, host=host, port=port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chessbot", description="Bitboard chess engine")
    parser.add_argument(
        "--log-level", default="WARNING", help="Logging level (default: WARNING)"
    )
    sub = parser.add_subparsers(dest="command")

    p_play = sub.add_parser("play", help="Play against the engine in the terminal")
    p_play.add_argument(
        "--difficulty",
        type=int,
        default=DEFAULT_DIFFICULTY,
        help=f"Search depth {MIN_DIFFICULTY}-{MAX_DIFFICULTY} (default: {DEFAULT_DIFFICULTY})",
    )

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    if args.command == "serve":
        serve(args.host, args.port)
    else:
        play(getattr(args, "difficulty", DEFAULT_DIFFICULTY))


if __name__ == "__main__":
    main()

from __future__ import annotations

from typing import Iterable, List

import pytest

from chessbot.cli.main import (
    DEFAULT_DIFFICULTY,
    build_parser,
    clamp_difficulty,
    play,
)
from chessbot.engine.board import Board
from chessbot.engine.game import Game


def _reader(lines: Iterable[str]):
    it = iter(lines)

    def read(prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return read


def _run(lines: List[str], difficulty: int = 1, game: Game | None = None):
    out: List[str] = []
    g = play(difficulty, read=_reader(lines), write=out.append, game=game)
    return g, out


@pytest.mark.parametrize("value", [1, 3, 5])
def test_clamp_difficulty_in_range(value: int) -> None:
    assert clamp_difficulty(value) == value


@pytest.mark.parametrize("value", [0, 6, -2])
def test_clamp_difficulty_out_of_range_uses_default(value: int) -> None:
    assert clamp_difficulty(value) == DEFAULT_DIFFICULTY


def test_exit_immediately() -> None:
    g, out = _run(["exit"])
    assert out[0] == "Difficulty set to 1."
    assert out[-1] == "Exiting the game. Goodbye!"
    assert g.board == Board()


def test_invalid_difficulty_falls_back_to_default() -> None:
    _, out = _run(["quit"], difficulty=9)
    assert out[0] == f"Difficulty set to {DEFAULT_DIFFICULTY}."


def test_human_move_then_engine_reply() -> None:
    g, out = _run(["e2 e4", "exit"])
    assert "You played: e2e4" in out
    replies = [line for line in out if line.startswith("Engine played: ")]
    assert len(replies) == 1
    assert g.move_history_uci()[0] == "e2e4"
    assert len(g.history) == 2
    assert g.move_history_uci()[1] == replies[0].split(": ")[1]


def test_bad_input_is_reported_and_loop_continues() -> None:
    g, out = _run(["e2e5", "hello", "e2e4"])
    assert any(line.startswith("Illegal move (") for line in out)
    assert any(line.startswith("Could not read move: ") for line in out)
    # Third line was played, then EOF ended the loop
    assert g.move_history_uci()[0] == "e2e4"


def test_mate_ends_the_game() -> None:
    game = Game.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    g, out = _run(["a1a8", "e2e4"], game=game)
    assert out[-1] == "Checkmate. White wins."
    assert g.move_history_uci() == ["a1a8"]


def test_stalemate_ends_the_game() -> None:
    game = Game.from_fen("7k/8/5QK1/8/8/8/8/8 w - - 0 1")
    _, out = _run(["f6f7"], game=game)
    assert out[-1] == "Stalemate."


def test_parser_subcommands() -> None:
    parser = build_parser()
    args = parser.parse_args(["play", "--difficulty", "4"])
    assert args.command == "play" and args.difficulty == 4
    args = parser.parse_args(["serve", "--port", "9000"])
    assert args.command == "serve" and args.port == 9000 and args.host == "127.0.0.1"

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from .attacks import KING_ATTACKS, KNIGHT_ATTACKS, iter_bits, lsb_square, pawn_attacks
from .move import str_to_square


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w - - 0 1"

# Returned by get_piece_at_square for an unoccupied square
EMPTY = "."


class Color(str, Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceType(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5


class Piece(IntEnum):
    """One of the twelve (color, piece type) pairs; doubles as bitboard index."""

    WP = 0
    WN = 1
    WB = 2
    WR = 3
    WQ = 4
    WK = 5
    BP = 6
    BN = 7
    BB = 8
    BR = 9
    BQ = 10
    BK = 11

    @classmethod
    def of(cls, color: Color, kind: PieceType) -> "Piece":
        return cls(kind + (0 if color is Color.WHITE else 6))

    @property
    def color(self) -> Color:
        return Color.WHITE if self < 6 else Color.BLACK

    @property
    def kind(self) -> PieceType:
        return PieceType(self % 6)

    @property
    def symbol(self) -> str:
        return PIECE_TO_CHAR[self]


# Piece indices for bitboards
WP, WN, WB, WR, WQ, WK, BP, BN, BB, BR, BQ, BK = Piece
PIECE_ORDER = list(Piece)
PIECE_TO_CHAR = {
    WP: "P",
    WN: "N",
    WB: "B",
    WR: "R",
    WQ: "Q",
    WK: "K",
    BP: "p",
    BN: "n",
    BB: "b",
    BR: "r",
    BQ: "q",
    BK: "k",
}
CHAR_TO_PIECE = {v: k for k, v in PIECE_TO_CHAR.items()}

RANK_2 = 0x000000000000FF00
RANK_7 = 0x00FF000000000000

ROOK_DELTAS = (8, -8, 1, -1)
BISHOP_DELTAS = (9, -9, 7, -7)


def _start_bitboards() -> List[int]:
    return [
        0x000000000000FF00,  # WP
        0x0000000000000042,  # WN
        0x0000000000000024,  # WB
        0x0000000000000081,  # WR
        0x0000000000000008,  # WQ
        0x0000000000000010,  # WK
        0x00FF000000000000,  # BP
        0x4200000000000000,  # BN
        0x2400000000000000,  # BB
        0x8100000000000000,  # BR
        0x0800000000000000,  # BQ
        0x1000000000000000,  # BK
    ]


def _on_same_line(origin: int, target: int, delta: int) -> bool:
    # Horizontal steps must stay on the origin's rank
    if delta in (1, -1):
        return origin // 8 == target // 8
    return True


def _on_same_diagonal(origin: int, target: int, delta: int) -> bool:
    df = (target % 8) - (origin % 8)
    dr = (target // 8) - (origin // 8)
    if abs(df) != abs(dr):
        return False
    return df > 0 if delta in (9, -7) else df < 0


def _ray_targets(
    origin: int,
    deltas: Tuple[int, ...],
    guard: Callable[[int, int, int], bool],
    own: int,
    opp: int,
) -> List[int]:
    targets: List[int] = []
    for delta in deltas:
        sq = origin + delta
        while 0 <= sq < 64 and guard(origin, sq, delta):
            if (own >> sq) & 1:
                break
            targets.append(sq)
            if (opp >> sq) & 1:
                break
            sq += delta
    return targets


def _first_blocker(origin: int, delta: int, guard: Callable[[int, int, int], bool], occ: int) -> int:
    """Return the first occupied square along a ray, or -1."""
    sq = origin + delta
    while 0 <= sq < 64 and guard(origin, sq, delta):
        if (occ >> sq) & 1:
            return sq
        sq += delta
    return -1


class MoveError(str, Enum):
    NO_PIECE_AT_SOURCE = "no piece of the side to move at source"
    NOT_PSEUDO_LEGAL = "target not among pseudo-legal destinations"
    LEAVES_KING_IN_CHECK = "move would leave own king in check"


@dataclass(frozen=True)
class InvalidMove:
    """Rejected move attempt; the board is unchanged."""

    from_sq: int
    to_sq: int
    reason: MoveError


class IllegalMoveError(ValueError):
    def __init__(self, invalid: InvalidMove) -> None:
        super().__init__(invalid.reason.value)
        self.invalid = invalid

    @property
    def reason(self) -> MoveError:
        return self.invalid.reason


@dataclass(frozen=True)
class MoveRecord:
    """Undo token for one applied move.

    Must be reverted (LIFO) before a sibling move is tried on the same board.
    """

    from_sq: int
    to_sq: int
    from_mask: int
    to_mask: int
    moved: Piece
    captured: Optional[Piece]
    prev_side: Color


@dataclass
class Board:
    """Bitboard position: twelve piece sets plus the side to move.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - ``Board()`` is the standard starting position.
    - No square is ever set in two bitboards outside ``try_make_move``.
    """

    # 12 piece bitboards, indexed by Piece
    bb: List[int] = field(default_factory=_start_bitboards)
    side_to_move: Color = Color.WHITE

    @classmethod
    def startpos(cls) -> "Board":
        return cls()

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Board: Board instance with the placement and side to move of ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, castling, en passant or
                counter fields.

        Notes:
            Castling rights and the en-passant target are validated and then
            dropped; neither rule is played by this engine.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        bb = [0] * 12
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                else:
                    if ch not in CHAR_TO_PIECE:
                        raise ValueError(f"invalid piece in FEN: {ch!r}")
                    if file_idx >= 8:
                        raise ValueError("too many squares in FEN rank")
                    bb[CHAR_TO_PIECE[ch]] |= 1 << (rank_idx * 8 + file_idx)
                    file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        if castling != "-" and any(ch not in "KQkq" for ch in castling):
            raise ValueError("invalid castling rights")
        if ep != "-":
            try:
                ep_sq = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            if ep_sq // 8 not in (2, 5):
                raise ValueError("invalid en passant square rank")
        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(bb=bb, side_to_move=Color(stm))

    def to_fen(self) -> str:
        """Serialize placement and side to move as a FEN string.

        Castling and en passant are always ``-`` and counters ``0 1``.
        """
        ranks_str: List[str] = []
        for rank_idx in range(7, -1, -1):
            run = 0
            row = []
            for file_idx in range(8):
                piece = self.piece_at(rank_idx * 8 + file_idx)
                if piece is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(piece.symbol)
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        return f"{'/'.join(ranks_str)} {self.side_to_move.value} - - 0 1"

    def render(self) -> str:
        """Return an ASCII diagram, rank 8 at the top."""
        lines = ["  a b c d e f g h"]
        for rank in range(7, -1, -1):
            cells = " ".join(self.get_piece_at_square(rank * 8 + f) for f in range(8))
            lines.append(f"{rank + 1} {cells} {rank + 1}")
        lines.append("  a b c d e f g h")
        return "\n".join(lines)

    # --- Occupancy ---
    @property
    def white_occupancy(self) -> int:
        bb = self.bb
        return bb[WP] | bb[WN] | bb[WB] | bb[WR] | bb[WQ] | bb[WK]

    @property
    def black_occupancy(self) -> int:
        bb = self.bb
        return bb[BP] | bb[BN] | bb[BB] | bb[BR] | bb[BQ] | bb[BK]

    @property
    def all_occupancy(self) -> int:
        return self.white_occupancy | self.black_occupancy

    def occupancy(self, color: Color) -> int:
        return self.white_occupancy if color is Color.WHITE else self.black_occupancy

    def piece_at(self, sq: int) -> Optional[Piece]:
        for piece in PIECE_ORDER:
            if (self.bb[piece] >> sq) & 1:
                return piece
        return None

    def get_piece_at_square(self, sq: int) -> str:
        """Return the piece letter on ``sq`` (uppercase white) or ``EMPTY``."""
        piece = self.piece_at(sq)
        return EMPTY if piece is None else piece.symbol

    def king_square(self, color: Color) -> Optional[int]:
        king_bb = self.bb[Piece.of(color, PieceType.KING)]
        if king_bb == 0:
            return None
        return lsb_square(king_bb)

    # --- Pseudo-legal generation ---
    def pawn_moves(self, sq: int, color: Color) -> List[int]:
        occ = self.all_occupancy
        opp = self.occupancy(color.opposite)
        moves: List[int] = []
        if color is Color.WHITE:
            one, two, home = sq + 8, sq + 16, RANK_2
        else:
            one, two, home = sq - 8, sq - 16, RANK_7
        if 0 <= one < 64 and not (occ >> one) & 1:
            moves.append(one)
            if (home >> sq) & 1 and not (occ >> two) & 1:
                moves.append(two)
        moves.extend(iter_bits(pawn_attacks(color is Color.WHITE)[sq] & opp))
        return moves

    def knight_moves(self, sq: int, color: Color) -> List[int]:
        return list(iter_bits(KNIGHT_ATTACKS[sq] & ~self.occupancy(color)))

    def king_moves(self, sq: int, color: Color) -> List[int]:
        return list(iter_bits(KING_ATTACKS[sq] & ~self.occupancy(color)))

    def rook_moves(self, sq: int, color: Color) -> List[int]:
        return _ray_targets(
            sq, ROOK_DELTAS, _on_same_line, self.occupancy(color), self.occupancy(color.opposite)
        )

    def bishop_moves(self, sq: int, color: Color) -> List[int]:
        return _ray_targets(
            sq,
            BISHOP_DELTAS,
            _on_same_diagonal,
            self.occupancy(color),
            self.occupancy(color.opposite),
        )

    def queen_moves(self, sq: int, color: Color) -> List[int]:
        return self.rook_moves(sq, color) + self.bishop_moves(sq, color)

    def pseudo_legal_targets(self, sq: int) -> List[int]:
        """Destinations for the piece on ``sq``, ignoring own-king safety.

        Empty when ``sq`` is empty or holds a piece of the side not to move.
        """
        piece = self.piece_at(sq)
        if piece is None or piece.color is not self.side_to_move:
            return []
        return _GENERATORS[piece.kind](self, sq, piece.color)

    # --- Make / unmake ---
    def try_make_move(self, from_sq: int, to_sq: int) -> Union[MoveRecord, InvalidMove]:
        """Apply a move in-place, or return why it was rejected.

        On success the side to move flips and the returned record undoes the
        move via ``unmake_move``. On failure the board is left untouched.
        """
        piece = self.piece_at(from_sq) if 0 <= from_sq < 64 else None
        if piece is None or piece.color is not self.side_to_move:
            return InvalidMove(from_sq, to_sq, MoveError.NO_PIECE_AT_SOURCE)
        if to_sq not in self.pseudo_legal_targets(from_sq):
            return InvalidMove(from_sq, to_sq, MoveError.NOT_PSEUDO_LEGAL)

        record = MoveRecord(
            from_sq=from_sq,
            to_sq=to_sq,
            from_mask=1 << from_sq,
            to_mask=1 << to_sq,
            moved=piece,
            captured=self.piece_at(to_sq),
            prev_side=self.side_to_move,
        )

        # Capture: clear destination from every set, then relocate
        keep = ~record.to_mask
        for idx in PIECE_ORDER:
            self.bb[idx] &= keep
        self.bb[piece] = (self.bb[piece] & ~record.from_mask) | record.to_mask

        if self.is_king_in_check(piece.color):
            self.unmake_move(record)
            return InvalidMove(from_sq, to_sq, MoveError.LEAVES_KING_IN_CHECK)

        self.side_to_move = self.side_to_move.opposite
        return record

    def make_move(self, from_sq: int, to_sq: int) -> MoveRecord:
        """Apply a move in-place and return its undo record.

        Raises:
            IllegalMoveError: If there is no own piece on ``from_sq``, ``to_sq``
                is not a pseudo-legal destination, or the move would leave the
                mover's king in check. The board is unchanged in every case.
        """
        result = self.try_make_move(from_sq, to_sq)
        if isinstance(result, InvalidMove):
            raise IllegalMoveError(result)
        return result

    def unmake_move(self, record: MoveRecord) -> None:
        """Revert ``record``, restoring the exact prior bitboards and side."""
        if not self.bb[record.moved] & record.to_mask:
            raise ValueError("move record does not match the board")
        self.bb[record.moved] = (self.bb[record.moved] & ~record.to_mask) | record.from_mask
        if record.captured is not None:
            self.bb[record.captured] |= record.to_mask
        self.side_to_move = record.prev_side

    @contextmanager
    def applied_move(self, from_sq: int, to_sq: int) -> Iterator[MoveRecord]:
        """Apply a move for the duration of a ``with`` block."""
        record = self.make_move(from_sq, to_sq)
        try:
            yield record
        finally:
            self.unmake_move(record)

    def move_piece(self, from_coord: str, to_coord: str) -> MoveRecord:
        """Apply a move given algebraic squares such as ``"e2", "e4"``."""
        return self.make_move(str_to_square(from_coord), str_to_square(to_coord))

    # --- Attacks and status ---
    def is_square_attacked(self, sq: int, attacker: Color) -> bool:
        """Return True if any ``attacker`` piece attacks ``sq``."""
        bb = self.bb
        pawns = bb[Piece.of(attacker, PieceType.PAWN)]
        knights = bb[Piece.of(attacker, PieceType.KNIGHT)]
        bishops = bb[Piece.of(attacker, PieceType.BISHOP)]
        rooks = bb[Piece.of(attacker, PieceType.ROOK)]
        queens = bb[Piece.of(attacker, PieceType.QUEEN)]
        king = bb[Piece.of(attacker, PieceType.KING)]

        if KNIGHT_ATTACKS[sq] & knights:
            return True
        if KING_ATTACKS[sq] & king:
            return True
        # Look outward from sq with the defender's capture geometry
        if pawn_attacks(attacker is not Color.WHITE)[sq] & pawns:
            return True

        occ = self.all_occupancy
        for delta in ROOK_DELTAS:
            blocker = _first_blocker(sq, delta, _on_same_line, occ)
            if blocker >= 0 and ((rooks | queens) >> blocker) & 1:
                return True
        for delta in BISHOP_DELTAS:
            blocker = _first_blocker(sq, delta, _on_same_diagonal, occ)
            if blocker >= 0 and ((bishops | queens) >> blocker) & 1:
                return True
        return False

    def is_king_in_check(self, color: Optional[Color] = None) -> bool:
        """Return True if ``color`` (default: side to move) is in check."""
        c = self.side_to_move if color is None else color
        ksq = self.king_square(c)
        if ksq is None:
            return False
        return self.is_square_attacked(ksq, c.opposite)

    def generate_all_legal_moves(self) -> List[Tuple[int, int]]:
        """Return ``(from, to)`` pairs for every legal move of the side to move.

        Each pseudo-legal candidate is tried and immediately reverted; rejected
        candidates are skipped. Order: origin squares ascending, then each
        piece's generation order.
        """
        legal: List[Tuple[int, int]] = []
        for from_sq in iter_bits(self.occupancy(self.side_to_move)):
            for to_sq in self.pseudo_legal_targets(from_sq):
                result = self.try_make_move(from_sq, to_sq)
                if isinstance(result, InvalidMove):
                    continue
                legal.append((from_sq, to_sq))
                self.unmake_move(result)
        return legal

    def has_legal_moves(self) -> bool:
        return bool(self.generate_all_legal_moves())


_GENERATORS: Dict[PieceType, Callable[[Board, int, Color], List[int]]] = {
    PieceType.PAWN: Board.pawn_moves,
    PieceType.KNIGHT: Board.knight_moves,
    PieceType.BISHOP: Board.bishop_moves,
    PieceType.ROOK: Board.rook_moves,
    PieceType.QUEEN: Board.queen_moves,
    PieceType.KING: Board.king_moves,
}

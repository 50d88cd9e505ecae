"""Rules engine backed by python-chess."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import chess

from reactive_chess.core.enums import Color, MoveFlag
from reactive_chess.engine.interfaces import (
    IRulesEngine,
    MoveDescriptor,
    MoveInput,
    MoveListOptions,
    MoveRecord,
    PlacedPiece,
)
from reactive_chess.notation.fen import STARTING_FEN, validate_fen
from reactive_chess.notation.models import FenValidity
from reactive_chess.notation.pgn import build_move_list, parse_move_list

_LOGGER = logging.getLogger(__name__)

_SETUP_HEADERS = ("SetUp", "FEN")


def _color(value: chess.Color) -> Color:
    return Color.WHITE if value == chess.WHITE else Color.BLACK


def _piece_type(letter: str) -> chess.PieceType | None:
    letter = letter.lower()
    if letter in chess.PIECE_SYMBOLS[1:]:
        return chess.PIECE_SYMBOLS.index(letter)
    return None


def _record(board: chess.Board, move: chess.Move) -> MoveRecord:
    """Describe *move*; *board* must be the position before it is played."""
    piece = board.piece_at(move.from_square)
    if piece is None:
        raise ValueError(f"No piece on {chess.square_name(move.from_square)}")

    flags = MoveFlag.NORMAL
    captured: str | None = None
    if board.is_en_passant(move):
        flags |= MoveFlag.EN_PASSANT | MoveFlag.CAPTURE
        captured = "p"
    elif board.is_capture(move):
        target = board.piece_at(move.to_square)
        flags |= MoveFlag.CAPTURE
        captured = target.symbol().lower() if target is not None else None

    if board.is_kingside_castling(move):
        flags |= MoveFlag.CASTLE_KINGSIDE
    elif board.is_queenside_castling(move):
        flags |= MoveFlag.CASTLE_QUEENSIDE

    distance = abs(chess.square_rank(move.to_square) - chess.square_rank(move.from_square))
    if piece.piece_type == chess.PAWN and distance == 2:
        flags |= MoveFlag.DOUBLE_PAWN
    if move.promotion:
        flags |= MoveFlag.PROMOTION

    return MoveRecord(
        color=_color(piece.color),
        from_square=chess.square_name(move.from_square),
        to_square=chess.square_name(move.to_square),
        piece=piece.symbol().lower(),
        san=board.san(move),
        flags=flags,
        captured=captured,
        promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
    )


class PythonChessEngine(IRulesEngine):
    """:class:`IRulesEngine` over a single :class:`chess.Board`."""

    __slots__ = ("_board", "_headers")

    def __init__(self, fen: str | None = None) -> None:
        self._board = chess.Board(fen) if fen else chess.Board()
        self._headers: dict[str, str] = {}

    # ── Loading ──────────────────────────────────────────────────────────

    def validate(self, fen: str) -> FenValidity:
        validity = validate_fen(fen)
        if not validity.valid:
            return validity
        try:
            chess.Board(fen)
        except ValueError as exc:
            return FenValidity(False, str(exc))
        return validity

    def load(self, fen: str) -> bool:
        if not self.validate(fen).valid:
            return False
        self._board = chess.Board(fen)
        self._headers.clear()
        return True

    def load_move_list(self, text: str, newline_char: str | None = None) -> bool:
        if newline_char and newline_char != "\n":
            text = text.replace(newline_char, "\n")
        if not text.strip():
            self.reset()
            return True

        try:
            parsed = parse_move_list(text)
            start_fen = parsed.headers.get("FEN")
            if start_fen is not None and not validate_fen(start_fen).valid:
                return False
            board = chess.Board(start_fen) if start_fen else chess.Board()
            for san in parsed.moves:
                move = board.parse_san(san)
                if not move:
                    # null move
                    return False
                board.push(move)
        except ValueError as exc:
            _LOGGER.debug("Rejected move list: %s", exc)
            return False

        self._board = board
        self._headers = {
            key: value
            for key, value in parsed.headers.items()
            if key not in _SETUP_HEADERS
        }
        if parsed.result_token != "*":
            self._headers["Result"] = parsed.result_token
        return True

    # ── Mutations ────────────────────────────────────────────────────────

    def move(self, descriptor: MoveInput) -> MoveRecord | None:
        move = self._resolve(descriptor)
        if move is None:
            return None
        record = _record(self._board, move)
        self._board.push(move)
        return record

    def undo(self) -> MoveRecord | None:
        if not self._board.move_stack:
            return None
        move = self._board.pop()
        return _record(self._board, move)

    def put(self, piece: PlacedPiece, square: str) -> bool:
        piece_type = _piece_type(piece.type)
        if piece_type is None:
            return False
        try:
            target = chess.parse_square(square)
        except ValueError:
            return False
        color = chess.WHITE if piece.color == Color.WHITE else chess.BLACK
        if piece_type == chess.KING:
            king = self._board.king(color)
            if king is not None and king != target:
                return False
        self._board.set_piece_at(target, chess.Piece(piece_type, color))
        self._board.clear_stack()
        return True

    def remove(self, square: str) -> PlacedPiece | None:
        try:
            target = chess.parse_square(square)
        except ValueError:
            return None
        piece = self._board.remove_piece_at(target)
        if piece is None:
            return None
        self._board.clear_stack()
        return PlacedPiece(piece.symbol().lower(), _color(piece.color))

    def reset(self) -> None:
        self._board.reset()
        self._headers.clear()

    def clear(self) -> None:
        self._board.clear()
        self._headers.clear()

    # ── Predicates ───────────────────────────────────────────────────────

    def in_check(self) -> bool:
        return self._board.is_check()

    def in_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def in_stalemate(self) -> bool:
        return self._board.is_stalemate()

    def in_draw(self) -> bool:
        return (
            self._board.halfmove_clock >= 100
            or self.in_stalemate()
            or self.insufficient_material()
            or self.in_threefold_repetition()
        )

    def in_threefold_repetition(self) -> bool:
        return self._board.is_repetition(3)

    def insufficient_material(self) -> bool:
        return self._board.is_insufficient_material()

    def game_over(self) -> bool:
        return self.in_checkmate() or self.in_draw()

    def turn(self) -> Color:
        return _color(self._board.turn)

    # ── Serialization ────────────────────────────────────────────────────

    def fen(self) -> str:
        # Keep the en-passant target after every double push, legal or not
        return self._board.fen(en_passant="fen")

    def pgn(self, options: MoveListOptions | None = None) -> str:
        options = options or MoveListOptions()
        root = self._board.root()
        headers = dict(self._headers)
        start_fen = root.fen(en_passant="fen")
        if start_fen != STARTING_FEN:
            headers["SetUp"] = "1"
            headers["FEN"] = start_fen
        return build_move_list(
            headers,
            self._sans(root),
            first_move_number=root.fullmove_number,
            black_first=root.turn == chess.BLACK,
            result=headers.get("Result"),
            newline=options.newline_char,
            max_width=options.max_width,
        )

    def history(self, verbose: bool = False) -> list[MoveRecord] | list[str]:
        if not verbose:
            return self._sans(self._board.root())
        replay = self._board.root()
        records: list[MoveRecord] = []
        for move in self._board.move_stack:
            records.append(_record(replay, move))
            replay.push(move)
        return records

    def legal_moves(self) -> list[str]:
        return [self._board.san(move) for move in self._board.legal_moves]

    def ascii(self) -> str:
        return str(self._board)

    def get(self, square: str) -> PlacedPiece | None:
        try:
            piece = self._board.piece_at(chess.parse_square(square))
        except ValueError:
            return None
        if piece is None:
            return None
        return PlacedPiece(piece.symbol().lower(), _color(piece.color))

    def square_color(self, square: str) -> str | None:
        try:
            index = chess.parse_square(square)
        except ValueError:
            return None
        parity = chess.square_file(index) + chess.square_rank(index)
        return "light" if parity % 2 else "dark"

    def set_header(self, key: str, value: str) -> None:
        self._headers[key] = value

    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    # ── Internal ─────────────────────────────────────────────────────────

    def _sans(self, root: chess.Board) -> list[str]:
        replay = root.copy(stack=False)
        sans: list[str] = []
        for move in self._board.move_stack:
            sans.append(replay.san(move))
            replay.push(move)
        return sans

    def _resolve(self, descriptor: MoveInput) -> chess.Move | None:
        if isinstance(descriptor, str):
            return self._resolve_text(descriptor.strip())

        if isinstance(descriptor, MoveDescriptor):
            origin = descriptor.from_square
            target = descriptor.to_square
            promotion = descriptor.promotion
        elif isinstance(descriptor, Mapping):
            origin = descriptor.get("from", "")
            target = descriptor.get("to", "")
            promotion = descriptor.get("promotion")
        else:
            raise TypeError(f"Unsupported move descriptor: {descriptor!r}")

        promotion_type = None
        if promotion:
            promotion_type = _piece_type(promotion)
            if promotion_type is None:
                return None
        try:
            move = chess.Move(
                chess.parse_square(origin),
                chess.parse_square(target),
                promotion=promotion_type,
            )
        except ValueError:
            return None
        return self._legal(move)

    def _resolve_text(self, text: str) -> chess.Move | None:
        try:
            move = self._board.parse_san(text)
        except ValueError:
            try:
                move = chess.Move.from_uci(text)
            except ValueError:
                return None
            return self._legal(move)
        return move if move else None

    def _legal(self, move: chess.Move) -> chess.Move | None:
        if not move:
            return None
        if move in self._board.legal_moves:
            return move
        if move.promotion is None:
            # Pawn to the last rank without a piece: promote to a queen
            queen = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
            if queen in self._board.legal_moves:
                return queen
        return None

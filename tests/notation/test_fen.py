"""Tests for FEN validation."""

import pytest

from reactive_chess.notation.fen import EMPTY_FEN, STARTING_FEN, validate_fen


class TestValidateFenAccepts:
    @pytest.mark.parametrize(
        "fen",
        [
            STARTING_FEN,
            EMPTY_FEN,
            "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1",
            "2n1r3/p1k2pp1/B1p3b1/P7/5bP1/2N1B3/1P2KP2/2R5 b - - 4 25",
            "r3k2r/8/8/8/8/8/8/R3K2R w Qk - 10 40",
        ],
    )
    def test_valid(self, fen: str) -> None:
        result = validate_fen(fen)
        assert result.valid
        assert result.error == ""


class TestValidateFenRejects:
    @pytest.mark.parametrize(
        ("fen", "message"),
        [
            ("wooo", "FEN string must contain six space-delimited fields."),
            (
                "8/8/8/8/8/8/8/8 w - - 0 0",
                "6th field (move number) must be a positive integer.",
            ),
            (
                "8/8/8/8/8/8/8/8 w - - -1 1",
                "5th field (half move counter) must be a non-negative integer.",
            ),
            (
                "8/8/8/8/8/8/8/8 w - e5 0 1",
                "4th field (en-passant square) is invalid.",
            ),
            (
                "8/8/8/8/8/8/8/8 w KX - 0 1",
                "3rd field (castling availability) is invalid.",
            ),
            (
                "8/8/8/8/8/8/8/8 x - - 0 1",
                "2nd field (side to move) is invalid.",
            ),
            (
                "8/8/8/8/8/8/8 w - - 0 1",
                "1st field (piece positions) does not contain 8 '/'-delimited rows.",
            ),
            (
                "44/8/8/8/8/8/8/8 w - - 0 1",
                "1st field (piece positions) is invalid [consecutive numbers].",
            ),
            (
                "7x/8/8/8/8/8/8/8 w - - 0 1",
                "1st field (piece positions) is invalid [invalid piece].",
            ),
            (
                "9/8/8/8/8/8/8/8 w - - 0 1",
                "1st field (piece positions) is invalid [row too large].",
            ),
            (
                "8/8/8/8/8/8/8/8 w - e3 0 1",
                "Illegal en-passant square",
            ),
        ],
    )
    def test_error_message(self, fen: str, message: str) -> None:
        result = validate_fen(fen)
        assert not result.valid
        assert result.error == message

    def test_checks_run_from_last_field(self) -> None:
        # Both the move number and the placement are wrong
        result = validate_fen("9/8 w - - 0 0")
        assert result.error == "6th field (move number) must be a positive integer."

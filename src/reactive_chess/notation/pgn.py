"""PGN parsing, comparison and serialization helpers.

These are pure text functions: legality is never checked here, that is the
rules engine's job.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping

from reactive_chess.notation.models import MoveRow, ParsedPgn, PlyEntry

_PGN_HEADER_RE = re.compile(r'^\[(\w+)\s+"((?:[^"\\]|\\.)*)"\]\s*$')
_PGN_RESULT_TOKENS = {"1-0", "0-1", "1/2-1/2", "*"}
_MOVE_NUMBER_RE = re.compile(r"^(\d+)\.(\.\.)?(.*)$")

# Token kinds produced by _movetext_tokens
_NUMBER = "number"
_ELLIPSIS = "ellipsis"
_SAN = "san"
_RESULT = "result"


def _movetext_tokens(movetext: str) -> Iterator[tuple[str, str]]:
    """Yield ``(kind, text)`` mainline tokens.

    Comments, variations and NAGs are skipped.
    """
    variation_depth = 0
    idx = 0
    total = len(movetext)

    while idx < total:
        ch = movetext[idx]

        if ch.isspace():
            idx += 1
            continue

        if ch == "{":
            end = movetext.find("}", idx + 1)
            idx = total if end < 0 else end + 1
            continue

        if ch == ";":
            end = movetext.find("\n", idx + 1)
            idx = total if end < 0 else end
            continue

        if ch == "(":
            variation_depth += 1
            idx += 1
            continue

        if ch == ")":
            variation_depth = max(0, variation_depth - 1)
            idx += 1
            continue

        token_end = idx
        while (
            token_end < total
            and not movetext[token_end].isspace()
            and movetext[token_end] not in "{};()"
        ):
            token_end += 1
        token = movetext[idx:token_end]
        idx = token_end

        if not token or variation_depth > 0:
            continue

        if token in _PGN_RESULT_TOKENS:
            yield _RESULT, token
            continue

        if token.startswith("$") and token[1:].isdigit():
            continue

        match = _MOVE_NUMBER_RE.match(token)
        if match:
            yield _NUMBER, match.group(1)
            if match.group(2):
                yield _ELLIPSIS, "..."
            token = match.group(3)

        if token.startswith("..."):
            yield _ELLIPSIS, "..."
            token = token[3:]
        token = token.lstrip(".").rstrip("!?")
        if token:
            yield _SAN, token


def _split_headers(pgn_text: str) -> tuple[dict[str, str], str]:
    headers: dict[str, str] = {}
    move_lines: list[str] = []
    in_headers = True

    for raw_line in pgn_text.splitlines():
        line = raw_line.strip()
        if not line:
            if in_headers and not headers:
                continue
            in_headers = False
            continue

        if in_headers and line.startswith("["):
            match = _PGN_HEADER_RE.match(line)
            if match is None:
                raise ValueError(f"Invalid PGN header line: {line}")
            key, raw_value = match.groups()
            headers[key] = raw_value.replace('\\"', '"').replace("\\\\", "\\")
            continue

        in_headers = False
        if line.startswith("%"):
            continue
        move_lines.append(line)

    return headers, "\n".join(move_lines)


def parse_move_list(pgn_text: str) -> ParsedPgn:
    """Parse a single PGN game into headers, SAN mainline and result.

    Raises:
        ValueError: on a malformed header line.
    """
    headers, movetext = _split_headers(pgn_text)
    moves: list[str] = []
    result_token = "*"
    for kind, text in _movetext_tokens(movetext):
        if kind == _SAN:
            moves.append(text)
        elif kind == _RESULT:
            result_token = text

    header_result = headers.get("Result")
    if result_token == "*" and header_result in _PGN_RESULT_TOKENS:
        result_token = header_result

    return ParsedPgn(headers=headers, moves=moves, result_token=result_token)


def _try_parse(pgn_text: str) -> ParsedPgn | None:
    try:
        return parse_move_list(pgn_text)
    except ValueError:
        return None


def move_tokens(pgn_text: str) -> list[str]:
    """SAN mainline of *pgn_text* (empty when it cannot be parsed)."""
    parsed = _try_parse(pgn_text)
    return parsed.moves if parsed is not None else []


def is_move_prefix(short: str, long: str) -> bool:
    """True when *short* replays strictly fewer plies of the same game as *long*."""
    a = _try_parse(short)
    b = _try_parse(long)
    if a is None or b is None:
        return False
    if a.headers.get("FEN") != b.headers.get("FEN"):
        return False
    return len(a.moves) < len(b.moves) and b.moves[: len(a.moves)] == a.moves


def appended_moves(previous: str, current: str) -> list[str] | None:
    """Plies that *current* appends to *previous*.

    ``None`` means *current* is not a plain extension of *previous* (no
    previous text, a rewrite, a truncation or an unrelated game) and the
    caller must reload from scratch.
    """
    if not previous or not current.startswith(previous):
        return None
    before = _try_parse(previous)
    after = _try_parse(current)
    if before is None or after is None:
        return None
    count = len(before.moves)
    if len(after.moves) <= count or after.moves[:count] != before.moves:
        return None
    return after.moves[count:]


def furthest_move_list(new: str, recorded: str, previous: str) -> str:
    """Longest known move list that *new* is a proper prefix of.

    Interactive editing often truncates the move list and re-extends it;
    the furthest text seen is kept as long as *new* stays on its line.
    """
    if not new:
        return new
    for candidate in (recorded, previous):
        if candidate and candidate != new and is_move_prefix(new, candidate):
            return candidate
    return new


def _wrap(groups: list[str], max_width: int, newline: str) -> str:
    if max_width <= 0:
        return " ".join(groups)
    parts: list[str] = []
    width = 0
    for idx, group in enumerate(groups):
        if idx and width + len(group) > max_width:
            parts.append(newline)
            width = 0
        elif idx:
            parts.append(" ")
            width += 1
        parts.append(group)
        width += len(group)
    return "".join(parts)


def build_move_list(
    headers: Mapping[str, str],
    sans: list[str],
    *,
    first_move_number: int = 1,
    black_first: bool = False,
    result: str | None = None,
    newline: str = "\n",
    max_width: int = 0,
) -> str:
    """Serialise headers and SAN moves as a numbered move list.

    ``1. e4 e5 2. Nf3``; a list starting with a black move opens with
    ``N. ...``.
    """
    groups: list[str] = []
    current = ""
    number = first_move_number
    for ply, san in enumerate(sans):
        white_moves = (ply % 2 == 0) != black_first
        if ply == 0 and not white_moves:
            current = f"{number}. ..."
        elif white_moves:
            if current:
                groups.append(current)
            current = f"{number}."
        current = f"{current} {san}"
        if not white_moves:
            number += 1
    if current:
        groups.append(current)
    if result:
        groups.append(result)

    header_lines = []
    for key, value in headers.items():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        header_lines.append(f'[{key} "{escaped}"]')
    header_text = newline.join(header_lines)
    body = _wrap(groups, max_width, newline)
    if header_text and body:
        return f"{header_text}{newline}{newline}{body}"
    return header_text or body


def move_rows(pgn_text: str, active_ply: int = 0) -> list[MoveRow]:
    """Group the mainline into numbered rows.

    The ply whose 1-based index equals *active_ply* is flagged active.
    """
    try:
        _, movetext = _split_headers(pgn_text)
    except ValueError:
        return []

    rows: list[MoveRow] = []
    row: MoveRow | None = None
    black_next = False
    count = 0
    for kind, text in _movetext_tokens(movetext):
        if kind == _NUMBER:
            number = int(text)
            if row is None or row.number != number:
                row = MoveRow(number)
                rows.append(row)
            black_next = False
        elif kind == _ELLIPSIS:
            black_next = True
        elif kind == _SAN:
            count += 1
            entry = PlyEntry(text, active=count == active_ply)
            if row is None:
                row = MoveRow(1)
                rows.append(row)
            if row.white is None and row.black is None and not black_next:
                row.white = entry
            elif row.black is None:
                row.black = entry
            else:
                row = MoveRow(row.number + 1, white=entry)
                rows.append(row)
            black_next = False
    return rows

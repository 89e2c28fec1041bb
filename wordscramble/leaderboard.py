"""Leaderboard entries, ranking and the flat CSV format they persist to."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, TextIO

logger = logging.getLogger("wordscramble")

DIFFICULTIES = ("Easy", "Medium", "Hard")
DEFAULT_DIFFICULTY = "Easy"
DIFFICULTY_CODES: Dict[str, int] = {"Easy": 1, "Medium": 2, "Hard": 3}
DIFFICULTY_MULTIPLIERS: Dict[str, float] = {"Easy": 1.0, "Medium": 1.5, "Hard": 2.0}
DEFAULT_PLAYER_NAME = "Player"

HEADER = ("RANK", "NAME", "SCORE", "GAMES", "ATTEMPTS", "AVG_TIME", "ACCURACY", "AVG_GUESS_TIME", "DIFFICULTY")
NO_DATA_MESSAGE = "No leaderboard data available."


@dataclass
class LeaderboardEntry:
    name: str
    score: int
    games: int = 0
    attempts: int = 0
    average_time: float = 0.0
    accuracy: float = 0.0
    average_guess_time: float = 0.0
    difficulty: str = DEFAULT_DIFFICULTY
    # Assigned by rank_entries(); never meaningful on its own.
    rank: int = field(default=0, compare=False)


def normalize_difficulty(value: object) -> str:
    """Resolve a difficulty name (any case) or code 1-3 to its canonical name.

    Raises:
        ValueError: if ``value`` names no known difficulty.
    """

    if isinstance(value, int) and not isinstance(value, bool):
        for name, code in DIFFICULTY_CODES.items():
            if code == value:
                return name
        raise ValueError(f"Unknown difficulty code {value!r}")
    text = str(value).strip()
    if text.isdigit():
        return normalize_difficulty(int(text))
    for name in DIFFICULTIES:
        if name.lower() == text.lower():
            return name
    raise ValueError(f"Unknown difficulty {value!r}")


def difficulty_from_code(code: int) -> str:
    """Map a stored code to a difficulty, falling back to Easy for unknown codes."""
    try:
        return normalize_difficulty(code)
    except ValueError:
        return DEFAULT_DIFFICULTY


def rank_entries(entries: Iterable[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """Order ``entries`` by score then accuracy (both descending) and number them 1..N."""
    ordered = sorted(entries, key=lambda e: (-e.score, -e.accuracy))
    for idx, entry in enumerate(ordered, start=1):
        entry.rank = idx
    return ordered


def format_row(entry: LeaderboardEntry) -> List[str]:
    return [
        str(entry.rank),
        entry.name,
        str(entry.score),
        str(entry.games),
        str(entry.attempts),
        f"{entry.average_time:.2f}",
        f"{entry.accuracy:.2f}",
        f"{entry.average_guess_time:.2f}",
        str(DIFFICULTY_CODES.get(entry.difficulty, 1)),
    ]


def parse_row(fields: Sequence[str]) -> Optional[LeaderboardEntry]:
    """Decode one CSV row; ``None`` when it is not a well-formed entry."""
    if len(fields) != len(HEADER):
        return None
    try:
        entry = LeaderboardEntry(
            name=fields[1],
            score=int(fields[2]),
            games=int(fields[3]),
            attempts=int(fields[4]),
            average_time=float(fields[5]),
            accuracy=float(fields[6]),
            average_guess_time=float(fields[7]),
            difficulty=difficulty_from_code(int(fields[8])),
            rank=int(fields[0]),
        )
    except ValueError:
        return None
    return entry


def _is_header(fields: Sequence[str]) -> bool:
    return bool(fields) and fields[0].strip().upper() == HEADER[0]


def write_leaderboard(stream: TextIO, entries: Iterable[LeaderboardEntry]) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    for entry in entries:
        writer.writerow(format_row(entry))


def read_leaderboard(stream: TextIO) -> List[LeaderboardEntry]:
    """Read entries from ``stream``, dropping blank and malformed rows.

    A header is optional: the first non-blank row is skipped when its first
    field is ``RANK``. Stored ranks and order are not trusted; the result is
    re-ranked.
    """

    loaded: List[LeaderboardEntry] = []
    first = True
    reader = csv.reader(stream)
    while True:
        try:
            fields = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            # The reader discards the offending line and resumes on the next one.
            logger.debug("Skipping unreadable leaderboard row %d: %s", reader.line_num, exc)
            first = False
            continue
        line_no = reader.line_num
        if not fields or not "".join(fields).strip():
            continue
        if first:
            first = False
            if _is_header(fields):
                continue
        entry = parse_row(fields)
        if entry is None:
            logger.debug("Skipping malformed leaderboard row %d: %r", line_no, fields)
            continue
        loaded.append(entry)
    return rank_entries(loaded)


def print_leaderboard(entries: Sequence[LeaderboardEntry]) -> None:
    if not entries:
        print(NO_DATA_MESSAGE)
        return
    print(
        f"{'Rank':<5}{'Name':<15}{'Score':<10}{'Games':<10}{'Attempts':<12}"
        f"{'Avg Time':<12}{'Accuracy':<12}{'Avg Guess':<15}{'Difficulty':<12}"
    )
    for entry in entries:
        accuracy = f"{entry.accuracy:.1f}%"
        print(
            f"{entry.rank:<5}{entry.name:<15}{entry.score:<10}{entry.games:<10}{entry.attempts:<12}"
            f"{entry.average_time:<12.1f}{accuracy:<12}{entry.average_guess_time:<15.2f}{entry.difficulty:<12}"
        )

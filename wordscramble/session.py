"""Game state for a single word-scramble player.

:class:`GameSession` owns the word catalog, the active round, the scoring
rules and the leaderboard, and persists the leaderboard and a metrics report
to flat text files. Randomness and time are injected so rounds can be replayed
deterministically in tests.
"""

from __future__ import annotations

import logging
import math
import random
import re
import string
import time
from dataclasses import replace
from typing import Callable, Dict, List, MutableSequence, Optional, Protocol, Set, TextIO, Tuple

from . import leaderboard as lb
from .metrics import Metrics, estimate_memory, report_lines

logger = logging.getLogger("wordscramble")

DEFAULT_WORDS = ("puzzle", "challenge", "example", "solution")
MIN_WORD_LENGTH = 2
MAX_WORD_LENGTH = 20
POINTS_PER_LETTER = 10
_WORD_PATTERN = re.compile(r"[A-Za-z]+")
# Only these are trimmed from words and word-list lines.
WHITESPACE = " \t\n\r"
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

NO_WORD_MESSAGE = "No word selected."
NO_HINTS_MESSAGE = "No more hints available."


def ascii_lower(text: str) -> str:
    """Lowercase A-Z only; other characters are left as they are."""
    return text.translate(_ASCII_LOWER)


class RandomSource(Protocol):
    """The two random operations a session needs; ``random.Random`` fits."""

    def randrange(self, stop: int) -> int: ...

    def shuffle(self, x: MutableSequence) -> None: ...


class GameSession:
    def __init__(
        self,
        *,
        rng: Optional[RandomSource] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
        player_name: str = "",
        difficulty: str = lb.DEFAULT_DIFFICULTY,
    ) -> None:
        self._rng: RandomSource = rng if rng is not None else random.Random(seed)
        self._clock: Callable[[], float] = clock or time.perf_counter

        self._words: List[str] = list(DEFAULT_WORDS)
        self._unique: Set[str] = {ascii_lower(w) for w in DEFAULT_WORDS}
        self._custom_scores: Dict[int, int] = {}
        self._leaderboard: List[lb.LeaderboardEntry] = []

        self._current_word = ""
        self._revealed: Set[int] = set()
        self._last_guess_correct = False
        self._last_checkpoint: Optional[float] = None

        self._total_guesses = 0
        self._correct_guesses = 0
        self._attempts = 0
        self._score = 0
        self._games_played = 0

        self._player_name = player_name
        self._difficulty = lb.normalize_difficulty(difficulty)
        self._metrics = Metrics()
        self._recompute_memory()

    # ------------------------------------------------------------------ catalog

    @property
    def words(self) -> Tuple[str, ...]:
        return tuple(self._words)

    @staticmethod
    def is_valid_word(word: str) -> bool:
        if not MIN_WORD_LENGTH <= len(word) <= MAX_WORD_LENGTH:
            return False
        return _WORD_PATTERN.fullmatch(word) is not None

    def add_word(self, word: str) -> bool:
        """Add ``word`` to the catalog; False if it is malformed or already present."""
        trimmed = word.strip(WHITESPACE)
        if not self.is_valid_word(trimmed):
            return False
        key = ascii_lower(trimmed)
        if key in self._unique:
            return False
        self._words.append(trimmed)
        self._unique.add(key)
        self._recompute_memory()
        return True

    def load_words_from_file(self, path: str) -> bool:
        """Add every line of ``path`` as a word, skipping blanks and rejects.

        Returns False only when the file cannot be opened.
        """

        start = self._clock()
        handle = self._open(path, "r", errors="replace")
        if handle is None:
            return False
        added = skipped = 0
        try:
            with handle:
                for line in handle:
                    candidate = line.strip(WHITESPACE)
                    if not candidate:
                        continue
                    if self.add_word(candidate):
                        added += 1
                    else:
                        skipped += 1
                        logger.debug("Skipping word %r from %s", candidate, path)
        finally:
            self._finish_file_operation(start)
        self._recompute_memory()
        logger.info("Loaded %d words from %s (%d skipped)", added, path, skipped)
        return True

    # ------------------------------------------------------------------ settings

    @property
    def difficulty(self) -> str:
        return self._difficulty

    def set_difficulty(self, level: object) -> None:
        self._difficulty = lb.normalize_difficulty(level)

    @property
    def difficulty_multiplier(self) -> float:
        return lb.DIFFICULTY_MULTIPLIERS[self._difficulty]

    @property
    def player_name(self) -> str:
        return self._player_name

    def set_player_name(self, name: str) -> None:
        self._player_name = name
        self._recompute_memory()

    def customize_scoring(self, word_length: int, reward: int) -> bool:
        """Award a fixed ``reward`` for words of ``word_length`` letters."""
        if word_length <= 0 or reward <= 0:
            return False
        self._custom_scores[word_length] = reward
        return True

    @property
    def custom_scores(self) -> Dict[int, int]:
        return dict(self._custom_scores)

    # ------------------------------------------------------------------ rounds

    @property
    def current_word(self) -> str:
        return self._current_word

    @property
    def revealed_positions(self) -> frozenset:
        return frozenset(self._revealed)

    def select_random_word(self) -> str:
        if not self._words:
            return ""
        self._current_word = self._words[self._rng.randrange(len(self._words))]
        self._revealed.clear()
        self._last_guess_correct = False
        self._last_checkpoint = self._clock()
        logger.info("Round started with a %d-letter word", len(self._current_word))
        return self._current_word

    def scramble_word(self, word: str) -> str:
        letters = list(word)
        if len(letters) > 1:
            self._rng.shuffle(letters)
        self._metrics.scramble_count += 1
        return "".join(letters)

    def check_guess(self, guess: str) -> bool:
        now = self._clock()
        if self._last_checkpoint is None:
            elapsed_ms = 1
        else:
            elapsed_ms = max(1, int((now - self._last_checkpoint) * 1000))
        self._metrics.record_guess(float(elapsed_ms))
        self._last_checkpoint = self._clock()

        self._total_guesses += 1
        self._attempts += 1
        correct = bool(self._current_word) and ascii_lower(guess) == ascii_lower(self._current_word)
        if correct:
            self._correct_guesses += 1
        self._last_guess_correct = correct
        return correct

    def points_for(self, word: str) -> int:
        """Points a correct guess of ``word`` is worth at the current difficulty."""
        base = self._custom_scores.get(len(word), len(word) * POINTS_PER_LETTER)
        # Half rounds up; Python's round() would round half to even.
        return int(math.floor(base * self.difficulty_multiplier + 0.5))

    def update_score(self) -> int:
        """Credit the current word if the last guess was correct; return points added."""
        if not self._current_word or not self._last_guess_correct:
            return 0
        points = self.points_for(self._current_word)
        self._score += points
        self._recompute_memory()
        return points

    def reset_attempts(self) -> None:
        self._attempts = 0

    def show_hint(self, level: int = 3) -> str:
        word = self._current_word
        if not word:
            return self._hint(NO_WORD_MESSAGE)
        if len(self._revealed) >= len(word):
            return self._hint(NO_HINTS_MESSAGE)
        if level == 1:
            self._revealed.add(0)
            return self._hint(f"Starts with: {word[0]}")
        if level == 2:
            self._revealed.update((0, len(word) - 1))
            return self._hint(f"Starts with {word[0]} ... ends with {word[-1]}")
        position = self._next_unrevealed()
        if position is None:
            return self._hint(NO_HINTS_MESSAGE)
        self._revealed.add(position)
        return self._hint(f"Letter at position {position + 1} is '{word[position]}'")

    def masked_word(self, mask: str = "_") -> str:
        return "".join(ch if idx in self._revealed else mask for idx, ch in enumerate(self._current_word))

    def _next_unrevealed(self) -> Optional[int]:
        for idx in range(len(self._current_word)):
            if idx not in self._revealed:
                return idx
        return None

    @staticmethod
    def _hint(message: str) -> str:
        logger.info("Hint: %s", message)
        return message

    # ------------------------------------------------------------------ counters

    @property
    def score(self) -> int:
        return self._score

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def total_guesses(self) -> int:
        return self._total_guesses

    @property
    def correct_guesses(self) -> int:
        return self._correct_guesses

    @property
    def games_played(self) -> int:
        return self._games_played

    @property
    def accuracy(self) -> float:
        if self._total_guesses == 0:
            return 0.0
        return self._correct_guesses / self._total_guesses * 100.0

    @property
    def metrics(self) -> Metrics:
        return replace(self._metrics)

    # ------------------------------------------------------------------ leaderboard

    @property
    def leaderboard(self) -> Tuple[lb.LeaderboardEntry, ...]:
        return tuple(replace(entry) for entry in self._leaderboard)

    def update_leaderboard(self, average_round_time: float) -> lb.LeaderboardEntry:
        """Record the session's current standing and re-rank the board."""
        self._games_played += 1
        entry = lb.LeaderboardEntry(
            name=self._player_name or lb.DEFAULT_PLAYER_NAME,
            score=self._score,
            games=self._games_played,
            attempts=self._attempts if self._attempts > 0 else self._total_guesses,
            average_time=average_round_time,
            accuracy=self.accuracy,
            average_guess_time=self._metrics.average_guess_time,
            difficulty=self._difficulty,
        )
        self._leaderboard = lb.rank_entries(self._leaderboard + [entry])
        self._recompute_memory()
        logger.info("Leaderboard updated: %s ranked %d of %d", entry.name, entry.rank, len(self._leaderboard))
        return replace(entry)

    def save_leaderboard_to_file(self, path: str) -> bool:
        start = self._clock()
        handle = self._open(path, "w", newline="")
        if handle is None:
            return False
        try:
            with handle:
                lb.write_leaderboard(handle, self._leaderboard)
        finally:
            self._finish_file_operation(start)
        logger.info("Saved %d leaderboard entries to %s", len(self._leaderboard), path)
        return True

    def load_leaderboard_from_file(self, path: str) -> bool:
        """Replace the leaderboard with the rows stored at ``path``."""
        start = self._clock()
        handle = self._open(path, "r", newline="", errors="replace")
        if handle is None:
            return False
        try:
            with handle:
                self._leaderboard = lb.read_leaderboard(handle)
        finally:
            self._finish_file_operation(start)
        self._recompute_memory()
        logger.info("Loaded %d leaderboard entries from %s", len(self._leaderboard), path)
        return True

    def save_metrics_to_file(self, path: str) -> bool:
        start = self._clock()
        handle = self._open(path, "w")
        if handle is None:
            return False
        lines = report_lines(
            self._metrics,
            player=self._player_name or lb.DEFAULT_PLAYER_NAME,
            score=self._score,
            accuracy=self.accuracy,
            guesses=self._total_guesses,
            correct=self._correct_guesses,
        )
        try:
            with handle:
                handle.write("\n".join(lines) + "\n")
        finally:
            self._finish_file_operation(start)
        return True

    # ------------------------------------------------------------------ internals

    def _open(self, path: str, mode: str, **kwargs) -> Optional[TextIO]:
        try:
            return open(path, mode, encoding="utf-8", **kwargs)
        except OSError as exc:
            logger.warning("Could not open %s (%s)", path, exc)
            return None

    def _finish_file_operation(self, start: float) -> None:
        elapsed_ms = int((self._clock() - start) * 1000)
        self._metrics.record_file_operation(float(max(0, elapsed_ms)))

    def _recompute_memory(self) -> None:
        self._metrics.record_memory(
            estimate_memory(
                self._words,
                self._unique,
                (entry.name for entry in self._leaderboard),
                self._player_name,
            )
        )

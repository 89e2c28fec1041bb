"""Performance counters kept by a game session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sized

# Fixed per-slot sizes so the estimate does not depend on the interpreter.
WORD_SLOT_BYTES = 32
ENTRY_SLOT_BYTES = 88


@dataclass
class Metrics:
    total_guess_time: float = 0.0
    guess_count: int = 0
    file_operations: int = 0
    total_file_io_time: float = 0.0
    total_memory: int = 0
    peak_memory: int = 0
    scramble_count: int = 0

    def record_guess(self, elapsed_ms: float) -> None:
        self.total_guess_time += elapsed_ms
        self.guess_count += 1

    def record_file_operation(self, elapsed_ms: float) -> None:
        self.file_operations += 1
        self.total_file_io_time += elapsed_ms

    def record_memory(self, total: int) -> None:
        self.total_memory = total
        self.peak_memory = max(self.peak_memory, total)

    @property
    def average_guess_time(self) -> float:
        if self.guess_count == 0:
            return 0.0
        return self.total_guess_time / self.guess_count


def estimate_memory(
    words: Iterable[str],
    unique_keys: Sized,
    entry_names: Iterable[str],
    player_name: str,
) -> int:
    """Deterministic byte estimate for the catalog, leaderboard and player name."""
    words = list(words)
    names = list(entry_names)
    total = len(words) * WORD_SLOT_BYTES + sum(len(w) for w in words)
    total += len(unique_keys) * WORD_SLOT_BYTES
    total += len(names) * ENTRY_SLOT_BYTES + sum(len(n) for n in names)
    total += len(player_name)
    return total


def report_lines(
    metrics: Metrics,
    *,
    player: str,
    score: int,
    accuracy: float,
    guesses: int,
    correct: int,
) -> List[str]:
    return [
        f"Player: {player}",
        f"Score: {score}",
        f"Accuracy: {accuracy:.1f}%",
        f"Guesses: {guesses}",
        f"Correct: {correct}",
        f"Total Guess Time: {metrics.total_guess_time:.2f} ms",
        f"File I/O Operations: {metrics.file_operations}",
        f"Total File I/O Time: {metrics.total_file_io_time:.2f} ms",
        f"Scrambles: {metrics.scramble_count}",
        f"Total Memory: {metrics.total_memory} bytes",
        f"Peak Memory: {metrics.peak_memory} bytes",
    ]

"""Terminal word scramble: unscramble the letters before you run out of patience, with a persistent leaderboard."""

import argparse
import json
import os
import sys
import time
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from shared import logs
from shared.settings import GameSettings, load_game_settings, settings_path

from . import leaderboard
from .leaderboard import DIFFICULTIES, LeaderboardEntry, print_leaderboard
from .metrics import Metrics
from .session import GameSession, RandomSource

__all__ = [
    "DIFFICULTIES",
    "GameSession",
    "LeaderboardEntry",
    "Metrics",
    "RandomSource",
    "build_session",
    "main",
    "play_round",
    "play_session",
    "print_leaderboard",
]

DATA_DIR = "data"
LOG_DIR = os.path.join(DATA_DIR, "logs")
SAFE_MODE = os.getenv("WORDSCRAMBLE_SAFE_MODE", "0") not in {"0", "false", "False", ""}
SAFE_MODE_MESSAGE = "Safe mode enabled; skipping persistence."
DEFAULT_ROUNDS = 3
HINT_LEVELS = (1, 2, 3)
InputFn = Callable[[str], str]
RoundResult = Tuple[bool, float]


def set_safe_mode(enabled: bool) -> None:
    """Allow callers (e.g., CLI flags/tests) to toggle persistence at runtime."""
    global SAFE_MODE
    SAFE_MODE = bool(enabled)


def build_session(
    config: GameSettings,
    *,
    rng: Optional[RandomSource] = None,
    clock: Optional[Callable[[], float]] = None,
) -> GameSession:
    """Create a session from ``config``: player, difficulty, scoring overrides, extra words."""
    try:
        difficulty = leaderboard.normalize_difficulty(config.difficulty)
    except ValueError:
        print(f"Unknown difficulty {config.difficulty!r}; using {leaderboard.DEFAULT_DIFFICULTY}.")
        difficulty = leaderboard.DEFAULT_DIFFICULTY
    session = GameSession(
        rng=rng,
        seed=config.seed,
        clock=clock,
        player_name=config.player_name,
        difficulty=difficulty,
    )
    for length, reward in config.custom_scores.items():
        session.customize_scoring(length, reward)
    if config.words_file and not session.load_words_from_file(config.words_file):
        print(f"Could not read word list {config.words_file}; using the built-in words.")
    return session


def run_doctor(config: GameSettings) -> None:
    print("Word Scramble diagnostics")
    print(f"- Python: {sys.version.split()[0]}")
    print(f"- Safe mode: {SAFE_MODE}")
    print(f"- Settings file: {settings_path()}")
    print(f"- Word list: {config.words_file or '(built-in words)'}")
    print(f"- Leaderboard file: {config.leaderboard_file}")
    print(f"- Metrics file: {config.metrics_file}")

    def _check(path: Optional[str]) -> str:
        if not path:
            return "n/a"
        try:
            if os.path.exists(path):
                with open(path, "r", encoding="utf-8") as f:
                    f.read(64)
                return "ok"
            return "missing"
        except (OSError, UnicodeDecodeError) as exc:
            return f"error ({exc})"

    print(f"- Word list status: {_check(config.words_file)}")
    print(f"- Leaderboard status: {_check(config.leaderboard_file)}")
    print(f"- Metrics status: {_check(config.metrics_file)}")


def _prompt(input_fn: InputFn, message: str) -> str:
    try:
        return input_fn(message).strip()
    except EOFError:
        return "quit"


def play_round(
    session: GameSession,
    hint_level: int = 3,
    input_fn: Optional[InputFn] = None,
    clock: Callable[[], float] = time.perf_counter,
) -> Optional[RoundResult]:
    """Play one word. Returns ``(solved, seconds)``, or None if the player quits."""
    input_fn = input_fn or input
    word = session.select_random_word()
    if not word:
        print("No words available to play.")
        return None
    scrambled = session.scramble_word(word)
    print(f"\nNew round! Difficulty: {session.difficulty}. Unscramble: {scrambled.upper()}")
    print("Type your guess, 'hint' for a clue, 'skip' to reveal the word, or 'quit' to stop.")
    start = clock()

    while True:
        text = _prompt(input_fn, "Your guess: ")
        command = text.lower()
        if command in {"q", "quit"}:
            print("Exiting round by request. No score recorded for this round.")
            return None
        if command in {"s", "skip"}:
            print(f"The word was: {word}")
            return False, clock() - start
        if command in {"h", "hint"}:
            print(session.show_hint(hint_level))
            print(f"So far: {session.masked_word()}")
            continue
        if not text:
            print("Please type a guess.")
            continue

        if session.check_guess(text):
            points = session.update_score()
            print(f"Correct! +{points} points (score: {session.score}).")
            return True, clock() - start
        print("Not quite, try again.")


def play_session(
    session: GameSession,
    rounds: int = DEFAULT_ROUNDS,
    hint_level: int = 3,
    input_fn: Optional[InputFn] = None,
    clock: Callable[[], float] = time.perf_counter,
) -> Dict[str, object]:
    """Play up to ``rounds`` words and record the result on the leaderboard."""
    rounds = max(1, rounds)
    session.reset_attempts()
    durations: List[float] = []
    solved = 0

    for i in range(1, rounds + 1):
        print(f"\nRound {i} of {rounds}")
        result = play_round(session, hint_level=hint_level, input_fn=input_fn, clock=clock)
        if result is None:
            break
        ok, duration = result
        durations.append(duration)
        solved += int(ok)

    summary: Dict[str, object] = {
        "player": session.player_name or leaderboard.DEFAULT_PLAYER_NAME,
        "difficulty": session.difficulty,
        "rounds": len(durations),
        "solved": solved,
        "score": session.score,
        "accuracy": round(session.accuracy, 2),
        "entry": None,
    }
    if durations:
        entry = session.update_leaderboard(sum(durations) / len(durations))
        summary["entry"] = asdict(entry)
    summary["leaderboard"] = [asdict(e) for e in session.leaderboard]
    return summary


def save_results(session: GameSession, config: GameSettings) -> bool:
    """Persist leaderboard and metrics unless safe mode is on."""
    if SAFE_MODE:
        print(SAFE_MODE_MESSAGE)
        return True
    ok = True
    for path, save, label in (
        (config.leaderboard_file, session.save_leaderboard_to_file, "leaderboard"),
        (config.metrics_file, session.save_metrics_to_file, "metrics"),
    ):
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        except OSError as exc:
            print(f"Could not save {label} to {path} ({exc}). Your latest results may not be persisted.")
            ok = False
            continue
        if not save(path):
            print(f"Could not save {label} to {path}. Your latest results may not be persisted.")
            ok = False
    return ok


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Word Scramble CLI with a persistent leaderboard.")
    parser.add_argument("--player", help="Player name recorded on the leaderboard.")
    parser.add_argument("--difficulty", choices=DIFFICULTIES, help="Scoring difficulty (Easy x1, Medium x1.5, Hard x2).")
    parser.add_argument("--words-file", help="Extra words to add, one per line.")
    parser.add_argument("--leaderboard-file", help="Leaderboard CSV path.")
    parser.add_argument("--metrics-file", help="Metrics report path.")
    parser.add_argument("--settings-file", help="Settings JSON path (overrides WORDSCRAMBLE_SETTINGS_PATH).")
    parser.add_argument("--rounds", type=int, default=DEFAULT_ROUNDS, help=f"Words per session (default {DEFAULT_ROUNDS}).")
    parser.add_argument("--hint-level", type=int, choices=HINT_LEVELS, help="1: first letter, 2: first and last, 3: next letter.")
    parser.add_argument("--seed", type=int, help="Seed for word selection and scrambling.")
    parser.add_argument("--log-dir", help=f"Directory for app.log (default {LOG_DIR}).")
    safe = parser.add_mutually_exclusive_group()
    safe.add_argument("--safe-mode", dest="safe_mode", action="store_true", help="Disable persistence during this run.")
    safe.add_argument("--persist", dest="safe_mode", action="store_false", help="Force persistence during this run.")
    parser.set_defaults(safe_mode=None)
    parser.add_argument(
        "--output",
        choices=("text", "json"),
        default="text",
        help="Choose text (default) or json summary output.",
    )
    parser.add_argument("--result-file", help="Optional path to write the summary JSON.")
    parser.add_argument("--show-leaderboard", action="store_true", help="Print the saved leaderboard and exit.")
    parser.add_argument(
        "--doctor",
        action="store_true",
        help="Run diagnostics (paths, safe mode, file status) and exit.",
    )
    return parser.parse_args(argv)


def _apply_overrides(config: GameSettings, args: argparse.Namespace) -> GameSettings:
    if args.player is not None:
        config.player_name = args.player
    if args.difficulty:
        config.difficulty = args.difficulty
    if args.words_file:
        config.words_file = args.words_file
    if args.leaderboard_file:
        config.leaderboard_file = args.leaderboard_file
    if args.metrics_file:
        config.metrics_file = args.metrics_file
    if args.seed is not None:
        config.seed = args.seed
    if args.hint_level is not None:
        config.hint_level = args.hint_level
    return config


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    if args.safe_mode is not None:
        set_safe_mode(args.safe_mode)
    config = _apply_overrides(load_game_settings(Path(args.settings_file) if args.settings_file else None), args)
    if args.doctor:
        run_doctor(config)
        return

    logger = None if SAFE_MODE else logs.init_logger(args.log_dir or LOG_DIR)
    try:
        session = build_session(config)
        if os.path.exists(config.leaderboard_file) and not session.load_leaderboard_from_file(config.leaderboard_file):
            print(f"Could not read leaderboard {config.leaderboard_file}; starting fresh.")
        if args.show_leaderboard:
            print_leaderboard(session.leaderboard)
            return

        print("Word Scramble (persistent leaderboard)")
        summary = play_session(session, rounds=args.rounds, hint_level=config.hint_level)
        save_results(session, config)

        if args.output == "json":
            payload = json.dumps(summary, indent=2)
            print(payload)
            if args.result_file:
                try:
                    with open(args.result_file, "w", encoding="utf-8") as f:
                        f.write(payload)
                except OSError as exc:
                    print(f"Could not write result file: {exc}")
        else:
            print(f"\nThanks for playing, {summary['player']}! Final score: {summary['score']}")
            print_leaderboard(session.leaderboard)
    finally:
        if logger is not None:
            logs.shutdown_logger(logger)

"""Helpers for reading/writing the game's JSON settings file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("wordscramble")

DATA_DIR = Path("data")
SETTINGS_ENV = "WORDSCRAMBLE_SETTINGS_PATH"
DEFAULT_SETTINGS_FILE = DATA_DIR / "settings.json"


@dataclass
class GameSettings:
    player_name: str = ""
    difficulty: str = "Easy"
    words_file: Optional[str] = None
    leaderboard_file: str = os.fspath(DATA_DIR / "leaderboard" / "leaderboard.csv")
    metrics_file: str = os.fspath(DATA_DIR / "metrics" / "metrics.txt")
    custom_scores: Dict[int, int] = field(default_factory=dict)
    seed: Optional[int] = None
    hint_level: int = 3


def settings_path() -> Path:
    """Settings location, overridable through ``WORDSCRAMBLE_SETTINGS_PATH``."""
    override = os.environ.get(SETTINGS_ENV)
    return Path(override) if override else DEFAULT_SETTINGS_FILE


def _coerce_scores(raw: Any) -> Dict[int, int]:
    scores: Dict[int, int] = {}
    if not isinstance(raw, dict):
        return scores
    for length, reward in raw.items():
        try:
            length_i, reward_i = int(length), int(reward)
        except (TypeError, ValueError):
            continue
        if length_i > 0 and reward_i > 0:
            scores[length_i] = reward_i
    return scores


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _optional_int(value: Any) -> Optional[int]:
    try:
        return None if value is None else int(value)
    except (TypeError, ValueError):
        return None


def load_game_settings(path: Optional[Path] = None) -> GameSettings:
    """
    Load settings from ``path`` merged onto :class:`GameSettings` defaults.

    Returns defaults if the file is missing or not a JSON object; keys with
    the wrong type keep their default.
    """
    path = Path(path) if path is not None else settings_path()
    settings = GameSettings()
    if not path.exists():
        return settings
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s (%s)", path, exc)
        return settings
    if not isinstance(raw, dict):
        return settings

    if isinstance(raw.get("player_name"), str):
        settings.player_name = raw["player_name"]
    if isinstance(raw.get("difficulty"), (str, int)):
        settings.difficulty = str(raw["difficulty"])
    if "words_file" in raw:
        settings.words_file = _optional_str(raw["words_file"])
    for key in ("leaderboard_file", "metrics_file"):
        value = _optional_str(raw.get(key))
        if value:
            setattr(settings, key, value)
    settings.custom_scores = _coerce_scores(raw.get("custom_scores"))
    settings.seed = _optional_int(raw.get("seed"))
    hint_level = _optional_int(raw.get("hint_level"))
    if hint_level is not None:
        settings.hint_level = hint_level
    return settings


def save_game_settings(settings: GameSettings, path: Optional[Path] = None) -> bool:
    """Write ``settings`` as JSON to ``path``; log and return False on failure."""
    path = Path(path) if path is not None else settings_path()
    data = asdict(settings)
    data["custom_scores"] = {str(k): v for k, v in settings.custom_scores.items()}
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not save settings to %s (%s)", path, exc)
        return False
    return True

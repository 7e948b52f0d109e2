"""Sound effects driven by the puzzle session's signals."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from PySide6.QtCore import QObject, QUrl
from PySide6.QtMultimedia import QSoundEffect

from letterhunt.core.session import PuzzleSession

logger = logging.getLogger(__name__)

SOUND_FILES: Dict[str, str] = {
    "correct": "correct.wav",
    "wrong": "wrong.wav",
    "tile_click": "tile_click.wav",
    "level_complete": "level_complete.wav",
}


class SoundBoard(QObject):
    """Maps session events to short sound effects.

    Missing files are logged once and skipped, so the game plays silently
    when no sounds are installed.
    """

    def __init__(
        self,
        sounds_dir: Optional[Path] = None,
        muted: bool = False,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._sounds_dir = sounds_dir or Path(__file__).resolve().parent.parent / "assets" / "sounds"
        self._muted = muted
        self._effects: Dict[str, QSoundEffect] = {}
        if not muted:
            self._load_effects()

    @property
    def muted(self) -> bool:
        return self._muted

    def set_muted(self, muted: bool) -> None:
        self._muted = muted
        if not muted and not self._effects:
            self._load_effects()

    def available(self) -> list[str]:
        return sorted(self._effects)

    def attach(self, session: PuzzleSession) -> None:
        session.word_found.connect(lambda _word: self.play("correct"))
        session.word_rejected.connect(lambda _candidate: self.play("wrong"))
        session.tile_toggled.connect(lambda _index, _selected: self.play("tile_click"))
        session.level_complete.connect(lambda _stars, _elapsed: self.play("level_complete"))

    def play(self, name: str) -> None:
        if self._muted:
            return
        effect = self._effects.get(name)
        if effect is not None:
            effect.play()

    def _load_effects(self) -> None:
        missing = []
        for name, filename in SOUND_FILES.items():
            path = self._sounds_dir / filename
            if not path.exists():
                missing.append(filename)
                continue
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(0.6)
            self._effects[name] = effect
        if missing:
            logger.warning("Sound files not found in %s: %s", self._sounds_dir, ", ".join(missing))

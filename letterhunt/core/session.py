from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from letterhunt.core.levels import Level, total_letters, validate_levels

logger = logging.getLogger(__name__)


class TileState(enum.Enum):
    AVAILABLE = "available"
    SELECTED = "selected"
    USED = "used"


class SessionState(enum.Enum):
    IDLE = "idle"
    PLAYING = "playing"
    LEVEL_COMPLETED = "level_completed"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Tile:
    """One letter of the shuffled pool; ``index`` is its position in the pool."""

    letter: str
    index: int
    state: TileState


@dataclass(frozen=True)
class Clue:
    clue: str
    display: str


@dataclass(frozen=True)
class ProgressSnapshot:
    found_count: int
    total_count: int
    elapsed_seconds: int
    star_rating: int


@dataclass(frozen=True)
class LevelRecord:
    """History entry appended once per completed level."""

    level_ordinal: int
    elapsed_seconds: int
    star_rating: int


@dataclass(frozen=True)
class StarThresholds:
    """Average seconds-per-word cutoffs for three and two stars."""

    three_star: float
    two_star: float


STRICT_THRESHOLDS = StarThresholds(three_star=3.33, two_star=5.0)
RELAXED_THRESHOLDS = StarThresholds(three_star=5.0, two_star=10.0)


def star_rating(elapsed_seconds: int, word_count: int, thresholds: StarThresholds = STRICT_THRESHOLDS) -> int:
    """Stars (1-3) earned for finishing *word_count* words in *elapsed_seconds*."""
    average = elapsed_seconds / max(word_count, 1)
    if average <= thresholds.three_star:
        return 3
    if average <= thresholds.two_star:
        return 2
    return 1


def shuffled(items: Sequence[str], rng: random.Random) -> list[str]:
    """Fisher-Yates shuffle returning a new list."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


class PuzzleSession(QObject):
    """Game state for one playthrough of a level sequence.

    The session owns the shuffled tile pool, the player's selection, the set of
    found words and the per-level timer. Renderers and the sound board hold a
    reference to it, read state through the query methods and react to its
    signals; nothing else mutates it.

    Interaction methods (``select_tile``, ``submit_selection``,
    ``request_hint``...) never raise on stale or out-of-range input. Clicks
    that race a state change are simply ignored.
    """

    level_loaded = Signal(int)
    tile_toggled = Signal(int, bool)
    selection_cleared = Signal(object)
    word_found = Signal(str)
    word_rejected = Signal(str)
    level_complete = Signal(int, int)
    game_complete = Signal(object)
    timer_tick = Signal(int)
    hint_given = Signal(int)

    def __init__(
        self,
        thresholds: StarThresholds = STRICT_THRESHOLDS,
        rng: Optional[random.Random] = None,
        tick_interval_ms: int = 1000,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._thresholds = thresholds
        self._rng = rng or random.Random()
        self._levels: tuple[Level, ...] = ()
        self._level_index = 0
        self._state = SessionState.IDLE
        self._letters: list[str] = []
        self._tile_states: list[TileState] = []
        self._selection: list[int] = []
        self._found_words: set[str] = set()
        self._used_indices: set[int] = set()
        self._elapsed_seconds = 0
        self._star_rating = 0
        self._history: list[LevelRecord] = []

        self._timer = QTimer(self)
        self._timer.setInterval(tick_interval_ms)
        self._timer.timeout.connect(self.tick)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def thresholds(self) -> StarThresholds:
        return self._thresholds

    @property
    def levels(self) -> tuple[Level, ...]:
        return self._levels

    @property
    def current_level_index(self) -> int:
        return self._level_index

    @property
    def current_level(self) -> Optional[Level]:
        """The level being played, or None before start and after the last level."""
        if 0 <= self._level_index < len(self._levels) and self._state is not SessionState.COMPLETE:
            return self._levels[self._level_index]
        return None

    @property
    def selection(self) -> tuple[int, ...]:
        return tuple(self._selection)

    @property
    def candidate(self) -> str:
        return "".join(self._letters[i] for i in self._selection)

    @property
    def found_words(self) -> frozenset[str]:
        return frozenset(self._found_words)

    @property
    def used_tile_indices(self) -> frozenset[int]:
        return frozenset(self._used_indices)

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed_seconds

    @property
    def star_rating(self) -> int:
        return self._star_rating

    @property
    def history(self) -> tuple[LevelRecord, ...]:
        return tuple(self._history)

    @property
    def timer_active(self) -> bool:
        return self._timer.isActive()

    def tiles(self) -> tuple[Tile, ...]:
        return tuple(
            Tile(letter=letter, index=i, state=self._tile_states[i]) for i, letter in enumerate(self._letters)
        )

    def clue_list(self) -> tuple[Clue, ...]:
        """Clues in level order; unfound words are shown as one blank per letter."""
        level = self.current_level
        if level is None:
            return ()
        return tuple(
            Clue(
                clue=entry.clue,
                display=entry.word if entry.word in self._found_words else " ".join("_" * len(entry.word)),
            )
            for entry in level.words
        )

    def progress(self) -> ProgressSnapshot:
        level = self.current_level
        return ProgressSnapshot(
            found_count=len(self._found_words),
            total_count=len(level.words) if level is not None else 0,
            elapsed_seconds=self._elapsed_seconds,
            star_rating=self._star_rating,
        )

    # ------------------------------------------------------------------
    # Level lifecycle
    # ------------------------------------------------------------------

    def start(self, levels: Sequence[Level]) -> None:
        """Begin a new playthrough of *levels*; raises InvalidContent if unplayable."""
        levels = tuple(levels)
        validate_levels(levels)
        self._stop_timer()
        self._levels = levels
        self._history = []
        self._level_index = 0
        self.load_level(0)

    def load_level(self, index: int) -> None:
        self._stop_timer()
        self._level_index = index
        self._selection = []
        self._found_words = set()
        self._used_indices = set()
        self._elapsed_seconds = 0
        self._star_rating = 0

        if not 0 <= index < len(self._levels):
            self._letters = []
            self._tile_states = []
            self._state = SessionState.COMPLETE
            logger.info("Game complete after %d level(s)", len(self._history))
            self.game_complete.emit(list(self._history))
            return

        level = self._levels[index]
        self._letters = shuffled(level.letters, self._rng)
        self._tile_states = [TileState.AVAILABLE] * len(self._letters)
        self._state = SessionState.PLAYING
        self._timer.start()
        logger.info("Loaded level %d (%d words, %d tiles)", level.ordinal, len(level.words), total_letters(level.words))
        self.level_loaded.emit(index)

    def advance(self) -> None:
        """Move on to the next level (or finish the game after the last one)."""
        if self._state in (SessionState.IDLE, SessionState.COMPLETE):
            return
        self.load_level(self._level_index + 1)

    def replay(self) -> None:
        """Reload the current level with a fresh shuffle; history is left as is."""
        if self._state in (SessionState.IDLE, SessionState.COMPLETE):
            return
        self.load_level(self._level_index)

    def stop(self) -> None:
        """Tear the session down, e.g. when returning to category selection."""
        self._stop_timer()
        self._state = SessionState.IDLE

    def tick(self) -> None:
        if self._state is not SessionState.PLAYING:
            return
        self._elapsed_seconds += 1
        self.timer_tick.emit(self._elapsed_seconds)

    def _stop_timer(self) -> None:
        if self._timer.isActive():
            self._timer.stop()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def select_tile(self, index: int) -> tuple[int, ...]:
        """Toggle tile *index* in the selection; stale or used tiles are ignored."""
        if self._state is not SessionState.PLAYING:
            return self.selection
        if not 0 <= index < len(self._letters) or self._tile_states[index] is TileState.USED:
            return self.selection

        if index in self._selection:
            self._selection.remove(index)
            self._tile_states[index] = TileState.AVAILABLE
            self.tile_toggled.emit(index, False)
        else:
            self._selection.append(index)
            self._tile_states[index] = TileState.SELECTED
            self.tile_toggled.emit(index, True)
        return self.selection

    def clear_selection(self) -> None:
        cleared = list(self._selection)
        for index in cleared:
            self._tile_states[index] = TileState.AVAILABLE
        self._selection = []
        if cleared:
            self.selection_cleared.emit(cleared)

    def submit_selection(self) -> Optional[str]:
        """Check the candidate against the level's unfound words.

        Returns the matched word, or None when the candidate was rejected.
        A rejected selection is left in place for the player to edit.
        """
        level = self.current_level
        if self._state is not SessionState.PLAYING or level is None or not self._selection:
            return None

        candidate = self.candidate
        match = next(
            (entry for entry in level.words if entry.word == candidate and entry.word not in self._found_words),
            None,
        )
        if match is None:
            logger.debug("Rejected candidate %r", candidate)
            self.word_rejected.emit(candidate)
            return None

        self._found_words.add(match.word)
        for index in self._selection:
            self._tile_states[index] = TileState.USED
            self._used_indices.add(index)
        self._selection = []
        self.word_found.emit(match.word)

        if len(self._found_words) == len(level.words):
            self._complete_level(level)
        return match.word

    def request_hint(self) -> Optional[int]:
        """Point at the first free tile that starts a random unfound word.

        Advisory only: selection and tile states are not touched. Returns the
        tile index, or None if there is nothing to hint at.
        """
        level = self.current_level
        if self._state is not SessionState.PLAYING or level is None:
            return None
        unfound = [entry for entry in level.words if entry.word not in self._found_words]
        if not unfound:
            return None

        first_letter = self._rng.choice(unfound).word[0]
        for index, letter in enumerate(self._letters):
            if letter == first_letter and self._tile_states[index] is TileState.AVAILABLE:
                self.hint_given.emit(index)
                return index
        return None

    def _complete_level(self, level: Level) -> None:
        self._stop_timer()
        self._star_rating = star_rating(self._elapsed_seconds, len(level.words), self._thresholds)
        self._history.append(
            LevelRecord(
                level_ordinal=level.ordinal,
                elapsed_seconds=self._elapsed_seconds,
                star_rating=self._star_rating,
            )
        )
        self._state = SessionState.LEVEL_COMPLETED
        logger.info(
            "Level %d complete in %ds (%d stars)", level.ordinal, self._elapsed_seconds, self._star_rating
        )
        self.level_complete.emit(self._star_rating, self._elapsed_seconds)

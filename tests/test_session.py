"""Tests for letterhunt.core.session – puzzle session engine."""

from __future__ import annotations

import random
from collections import Counter

import pytest
from PySide6.QtCore import QCoreApplication, QObject

from letterhunt.core.levels import InvalidContent, Level, WordEntry
from letterhunt.core.session import (
    RELAXED_THRESHOLDS,
    STRICT_THRESHOLDS,
    LevelRecord,
    PuzzleSession,
    SessionState,
    TileState,
    shuffled,
    star_rating,
)


def _level(ordinal: int, *words: str) -> Level:
    return Level(
        ordinal=ordinal,
        words=tuple(WordEntry(word=w, clue=f"clue for {w}", definition=f"def of {w}") for w in words),
    )


THREE_LEVELS = (
    _level(1, "DOG", "CAT", "SUN"),
    _level(2, "APPLE", "BEACH"),
    _level(3, "TREE"),
)


class Recorder:
    """Collects emitted signals as (name, args) tuples."""

    def __init__(self, session: PuzzleSession) -> None:
        self.events: list[tuple] = []
        for name in (
            "level_loaded",
            "tile_toggled",
            "selection_cleared",
            "word_found",
            "word_rejected",
            "level_complete",
            "game_complete",
            "timer_tick",
            "hint_given",
        ):
            getattr(session, name).connect(lambda *args, _n=name: self.events.append((_n, args)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def of(self, name: str) -> list[tuple]:
        return [args for n, args in self.events if n == name]


@pytest.fixture()
def session() -> PuzzleSession:
    s = PuzzleSession(rng=random.Random(1234))
    yield s
    s.stop()


def _indices_for(session: PuzzleSession, word: str) -> list[int]:
    """Pick free tile indices spelling *word* in order."""
    picked: list[int] = []
    for letter in word:
        for tile in session.tiles():
            if tile.letter == letter and tile.state is TileState.AVAILABLE and tile.index not in picked:
                picked.append(tile.index)
                break
        else:
            raise AssertionError(f"no free tile for {letter!r}")
    return picked


def _spell(session: PuzzleSession, word: str) -> list[int]:
    indices = _indices_for(session, word)
    for i in indices:
        session.select_tile(i)
    return indices


def _solve_level(session: PuzzleSession, seconds: int = 0) -> None:
    for _ in range(seconds):
        session.tick()
    for entry in session.current_level.words:
        _spell(session, entry.word)
        assert session.submit_selection() == entry.word


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

class TestStarRating:
    def test_three_stars_at_three_seconds_per_word(self):
        assert star_rating(9, 3) == 3

    def test_strict_boundaries(self):
        assert star_rating(15, 3) == 2  # 5.0 s/word
        assert star_rating(16, 3) == 1

    def test_relaxed_profile(self):
        assert star_rating(15, 3, RELAXED_THRESHOLDS) == 3
        assert star_rating(30, 3, RELAXED_THRESHOLDS) == 2
        assert star_rating(31, 3, RELAXED_THRESHOLDS) == 1

    def test_zero_seconds(self):
        assert star_rating(0, 4) == 3


# ---------------------------------------------------------------------------
# Shuffle
# ---------------------------------------------------------------------------

class TestShuffle:
    @pytest.mark.parametrize("seed", [0, 1, 7, 42, 999])
    def test_is_permutation(self, seed: int):
        letters = list("DOGCATSUN")
        assert Counter(shuffled(letters, random.Random(seed))) == Counter(letters)

    def test_does_not_mutate_input(self):
        letters = list("ABCDE")
        shuffled(letters, random.Random(3))
        assert letters == list("ABCDE")

    def test_single_and_empty(self):
        assert shuffled(["A"], random.Random(0)) == ["A"]
        assert shuffled([], random.Random(0)) == []


# ---------------------------------------------------------------------------
# start / load_level
# ---------------------------------------------------------------------------

class TestStart:
    def test_rejects_empty_levels(self, session: PuzzleSession):
        with pytest.raises(InvalidContent):
            session.start([])

    def test_rejects_level_without_words(self, session: PuzzleSession):
        with pytest.raises(InvalidContent):
            session.start([Level(ordinal=1, words=())])

    @pytest.mark.parametrize("word", ["", "D0G", "dog", "NO SPACE"])
    def test_rejects_bad_words(self, session: PuzzleSession, word: str):
        with pytest.raises(InvalidContent):
            session.start([_level(1, word)])

    def test_rejects_duplicate_words(self, session: PuzzleSession):
        with pytest.raises(InvalidContent, match="more than once"):
            session.start([_level(1, "DOG", "DOG")])

    def test_failed_start_leaves_session_idle(self, session: PuzzleSession):
        with pytest.raises(InvalidContent):
            session.start([])
        assert session.state is SessionState.IDLE
        assert session.tiles() == ()

    def test_loads_first_level(self, session: PuzzleSession):
        rec = Recorder(session)
        session.start(THREE_LEVELS)
        assert session.state is SessionState.PLAYING
        assert session.current_level_index == 0
        assert session.current_level is THREE_LEVELS[0]
        assert rec.of("level_loaded") == [(0,)]
        assert session.timer_active

    def test_restart_resets_history(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _solve_level(session)
        assert len(session.history) == 1
        session.start(THREE_LEVELS)
        assert session.history == ()
        assert session.current_level_index == 0


class TestLoadLevel:
    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_tile_count_matches_letters(self, session: PuzzleSession, index: int):
        session.start(THREE_LEVELS)
        session.load_level(index)
        level = THREE_LEVELS[index]
        tiles = session.tiles()
        assert len(tiles) == sum(len(w.word) for w in level.words)
        assert Counter(t.letter for t in tiles) == Counter(level.letters)
        assert [t.index for t in tiles] == list(range(len(tiles)))
        assert all(t.state is TileState.AVAILABLE for t in tiles)

    def test_clears_progress(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _spell(session, "DOG")
        session.submit_selection()
        _spell(session, "CA")
        session.tick()
        session.load_level(0)
        assert session.found_words == frozenset()
        assert session.used_tile_indices == frozenset()
        assert session.selection == ()
        assert session.elapsed_seconds == 0

    def test_out_of_range_completes_game(self, session: PuzzleSession):
        rec = Recorder(session)
        session.start(THREE_LEVELS)
        session.load_level(3)
        assert session.state is SessionState.COMPLETE
        assert session.current_level is None
        assert rec.of("game_complete") == [([],)]
        assert not session.timer_active

    def test_only_one_timer_running_after_reloads(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        session.replay()
        session.replay()
        assert session.timer_active
        session.stop()
        assert not session.timer_active
        session.stop()
        assert not session.timer_active


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class TestSelectTile:
    def test_append_in_click_order(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        assert session.select_tile(4) == (4,)
        assert session.select_tile(1) == (4, 1)
        tiles = session.tiles()
        assert tiles[4].state is TileState.SELECTED
        assert session.candidate == tiles[4].letter + tiles[1].letter

    def test_toggle_twice_restores_selection(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        session.select_tile(0)
        session.select_tile(2)
        before = session.selection
        session.select_tile(5)
        session.select_tile(5)
        assert session.selection == before
        assert session.tiles()[5].state is TileState.AVAILABLE

    def test_deselect_keeps_remaining_order(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        for i in (3, 0, 6, 1):
            session.select_tile(i)
        session.select_tile(0)
        assert session.selection == (3, 6, 1)

    def test_emits_toggle(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        session.select_tile(2)
        session.select_tile(2)
        assert rec.of("tile_toggled") == [(2, True), (2, False)]

    @pytest.mark.parametrize("index", [-1, 9, 100])
    def test_out_of_range_is_noop(self, session: PuzzleSession, index: int):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        assert session.select_tile(index) == ()
        assert rec.events == []

    def test_used_tile_is_noop(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        used = _spell(session, "DOG")
        session.submit_selection()
        rec = Recorder(session)
        assert session.select_tile(used[0]) == ()
        assert rec.events == []

    def test_ignored_before_start(self, session: PuzzleSession):
        assert session.select_tile(0) == ()


class TestClearSelection:
    def test_clears_and_resets_states(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        session.select_tile(1)
        session.select_tile(3)
        session.clear_selection()
        assert session.selection == ()
        assert all(t.state is TileState.AVAILABLE for t in session.tiles())
        assert rec.of("selection_cleared") == [([1, 3],)]

    def test_empty_selection_emits_nothing(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        session.clear_selection()
        assert rec.events == []

    def test_keeps_used_tiles(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        used = _spell(session, "DOG")
        session.submit_selection()
        session.select_tile(_indices_for(session, "C")[0])
        session.clear_selection()
        states = session.tiles()
        assert all(states[i].state is TileState.USED for i in used)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

class TestSubmitSelection:
    def test_match_retires_tiles(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        indices = _spell(session, "DOG")
        assert session.submit_selection() == "DOG"
        assert session.found_words == frozenset({"DOG"})
        assert session.used_tile_indices == frozenset(indices)
        assert len(session.used_tile_indices) == 3
        assert session.selection == ()
        assert all(session.tiles()[i].state is TileState.USED for i in indices)
        assert rec.of("word_found") == [("DOG",)]

    def test_wrong_order_is_rejected(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        indices = _spell(session, "GOD")
        assert session.submit_selection() is None
        assert session.selection == tuple(indices)
        assert session.found_words == frozenset()
        assert rec.of("word_rejected") == [("GOD",)]

    def test_already_found_word_is_rejected(self):
        s = PuzzleSession(rng=random.Random(5))
        s.start([_level(1, "AB", "BA", "ABAB")])
        _spell(s, "AB")
        assert s.submit_selection() == "AB"
        _spell(s, "AB")
        assert s.submit_selection() is None
        assert s.found_words == frozenset({"AB"})
        s.stop()

    def test_empty_selection_is_noop(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        assert session.submit_selection() is None
        assert rec.events == []

    def test_used_count_matches_found_letters(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        for word in ("SUN", "CAT"):
            _spell(session, word)
            session.submit_selection()
        assert len(session.used_tile_indices) == 6

    def test_completing_level(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        _solve_level(session, seconds=9)
        assert session.state is SessionState.LEVEL_COMPLETED
        assert session.star_rating == 3
        assert session.history == (LevelRecord(level_ordinal=1, elapsed_seconds=9, star_rating=3),)
        assert rec.of("level_complete") == [(3, 9)]
        assert not session.timer_active

    def test_slow_level_gets_fewer_stars(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _solve_level(session, seconds=40)
        assert session.star_rating == 1

    def test_relaxed_thresholds(self):
        s = PuzzleSession(thresholds=RELAXED_THRESHOLDS, rng=random.Random(2))
        s.start(THREE_LEVELS)
        _solve_level(s, seconds=15)
        assert s.star_rating == 3
        s.stop()

    def test_interaction_ignored_after_completion(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _solve_level(session)
        rec = Recorder(session)
        session.select_tile(0)
        session.submit_selection()
        assert session.request_hint() is None
        session.tick()
        assert rec.events == []


# ---------------------------------------------------------------------------
# Timer ticks
# ---------------------------------------------------------------------------

class TestTick:
    def test_counts_seconds(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        session.tick()
        session.tick()
        assert session.elapsed_seconds == 2
        assert rec.of("timer_tick") == [(1,), (2,)]
        assert session.progress().elapsed_seconds == 2

    def test_ignored_when_idle(self, session: PuzzleSession):
        session.tick()
        assert session.elapsed_seconds == 0

    def test_stop_freezes_clock(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        session.tick()
        session.stop()
        session.tick()
        assert session.elapsed_seconds == 1
        assert session.state is SessionState.IDLE


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------

class TestRequestHint:
    def test_points_at_first_letter_of_unfound_word(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        rec = Recorder(session)
        index = session.request_hint()
        assert index is not None
        assert session.tiles()[index].letter in {"D", "C", "S"}
        assert rec.of("hint_given") == [(index,)]

    def test_lowest_free_tile_wins(self):
        s = PuzzleSession(rng=random.Random(0))
        s.start([_level(1, "AAA")])
        assert s.request_hint() == 0
        s.select_tile(0)
        assert s.request_hint() == 1
        s.stop()

    def test_does_not_touch_selection(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        session.select_tile(3)
        before = session.tiles()
        session.request_hint()
        assert session.selection == (3,)
        assert session.tiles() == before

    def test_skips_found_words(self):
        s = PuzzleSession(rng=random.Random(9))
        s.start([_level(1, "DOG", "CAT")])
        _spell(s, "DOG")
        s.submit_selection()
        for _ in range(5):
            assert s.tiles()[s.request_hint()].letter == "C"
        s.stop()

    def test_silent_when_letter_unavailable(self):
        s = PuzzleSession(rng=random.Random(0))
        s.start([_level(1, "XY")])
        s.select_tile(_indices_for(s, "X")[0])
        rec = Recorder(s)
        assert s.request_hint() is None
        assert rec.events == []
        s.stop()

    def test_noop_when_all_found(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _solve_level(session)
        rec = Recorder(session)
        assert session.request_hint() is None
        assert rec.events == []


# ---------------------------------------------------------------------------
# Progression
# ---------------------------------------------------------------------------

class TestProgression:
    def test_advance_to_next_level(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _solve_level(session)
        session.advance()
        assert session.current_level_index == 1
        assert session.state is SessionState.PLAYING
        assert session.star_rating == 0
        assert session.timer_active

    def test_full_playthrough_emits_game_complete(self, session: PuzzleSession):
        rec = Recorder(session)
        session.start(THREE_LEVELS)
        for _ in THREE_LEVELS:
            _solve_level(session, seconds=3)
            session.advance()
        assert session.state is SessionState.COMPLETE
        (history,) = rec.of("game_complete")[0]
        assert [r.level_ordinal for r in history] == [1, 2, 3]
        assert len(history) == len(session.history) == 3

    def test_skipping_levels_shortens_history(self, session: PuzzleSession):
        rec = Recorder(session)
        session.start(THREE_LEVELS)
        _solve_level(session)
        session.advance()
        session.advance()
        session.advance()
        (history,) = rec.of("game_complete")[0]
        assert len(history) == 1

    def test_advance_after_complete_is_noop(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        session.load_level(3)
        rec = Recorder(session)
        session.advance()
        session.replay()
        assert rec.events == []

    def test_replay_reshuffles_without_touching_history(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _solve_level(session)
        session.advance()
        _solve_level(session)
        assert len(session.history) == 2

        first_letters = [t.letter for t in session.tiles()]
        rec = Recorder(session)
        reshuffled = False
        for _ in range(10):
            session.replay()
            if [t.letter for t in session.tiles()] != first_letters:
                reshuffled = True
        assert reshuffled
        assert session.current_level_index == 1
        assert len(session.history) == 2
        assert rec.of("level_loaded") == [(1,)] * 10

        _solve_level(session)
        assert len(session.history) == 3
        assert session.history[-1].level_ordinal == 2


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:
    def test_clue_list_blank_pattern(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        clues = session.clue_list()
        assert [c.clue for c in clues] == ["clue for DOG", "clue for CAT", "clue for SUN"]
        assert clues[0].display == "_ _ _"

    def test_clue_list_reveals_found_words(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _spell(session, "CAT")
        session.submit_selection()
        assert [c.display for c in session.clue_list()] == ["_ _ _", "CAT", "_ _ _"]

    def test_progress_snapshot(self, session: PuzzleSession):
        session.start(THREE_LEVELS)
        _spell(session, "SUN")
        session.submit_selection()
        session.tick()
        p = session.progress()
        assert (p.found_count, p.total_count, p.elapsed_seconds, p.star_rating) == (1, 3, 1, 0)

    def test_queries_before_start(self, session: PuzzleSession):
        assert session.clue_list() == ()
        assert session.progress().total_count == 0
        assert session.thresholds == STRICT_THRESHOLDS


# ---------------------------------------------------------------------------
# Qt ownership
# ---------------------------------------------------------------------------

class TestOwnership:
    def test_sessions_share_one_application(self, qt_core_app):
        assert QCoreApplication.instance() is qt_core_app

    def test_session_follows_its_parent(self):
        owner = QObject()
        s = PuzzleSession(parent=owner)
        assert s.parent() is owner
        assert s in owner.children()
        s.stop()

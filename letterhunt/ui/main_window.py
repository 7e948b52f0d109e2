from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from letterhunt.core.config import GameConfig
from letterhunt.core.levels import Category, InvalidContent, LevelRepository
from letterhunt.core.session import PuzzleSession
from letterhunt.ui.colors import PuzzleColors, star_text
from letterhunt.ui.overlays import GameCompleteOverlay, LevelCompleteOverlay, format_clock
from letterhunt.ui.sounds import SoundBoard
from letterhunt.ui.tile_widgets import ClueListWidget, TileGrid

logger = logging.getLogger(__name__)

HINT_HIGHLIGHT_MS = 2000
REJECT_FLASH_MS = 500


class MainWindow(QMainWindow):
    """Category picker and puzzle board for a single PuzzleSession.

    The window never changes game state directly: it forwards clicks to the
    session and redraws from the session's signals. Hint highlights and the
    rejection flash are cosmetic single-shot timers owned here and cancelled
    whenever the board is rebuilt.
    """

    def __init__(self, levels: LevelRepository, config: Optional[GameConfig] = None) -> None:
        super().__init__()
        self._levels_repo = levels
        self._config = config or GameConfig()
        self._category: Optional[Category] = None

        self._session = PuzzleSession(thresholds=self._config.thresholds, parent=self)
        self._sounds = SoundBoard(muted=self._config.muted, parent=self)
        self._sounds.attach(self._session)

        self._session.level_loaded.connect(self._on_level_loaded)
        self._session.tile_toggled.connect(lambda _i, _selected: self._refresh_selection())
        self._session.selection_cleared.connect(lambda _indices: self._refresh_selection())
        self._session.word_found.connect(self._on_word_found)
        self._session.word_rejected.connect(self._on_word_rejected)
        self._session.level_complete.connect(self._on_level_complete)
        self._session.game_complete.connect(self._on_game_complete)
        self._session.timer_tick.connect(self._on_timer_tick)
        self._session.hint_given.connect(self._on_hint_given)

        self._hint_timer = QTimer(self)
        self._hint_timer.setSingleShot(True)
        self._hint_timer.setInterval(HINT_HIGHLIGHT_MS)
        self._hint_timer.timeout.connect(lambda: self._grid.set_hinted(None))

        self._reject_timer = QTimer(self)
        self._reject_timer.setSingleShot(True)
        self._reject_timer.setInterval(REJECT_FLASH_MS)
        self._reject_timer.timeout.connect(lambda: self._grid.set_rejected(()))

        self.setWindowTitle("Letterhunt")
        self.setMinimumSize(900, 640)
        self.setStyleSheet(
            f"""
            QMainWindow {{
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                    stop:0 {PuzzleColors.BG_TOP}, stop:1 {PuzzleColors.BG_BOTTOM});
            }}
            """
        )

        self._stack = QStackedWidget()
        self._category_screen = self._build_category_screen()
        self._game_screen = self._build_game_screen()
        self._stack.addWidget(self._category_screen)
        self._stack.addWidget(self._game_screen)
        self.setCentralWidget(self._stack)

        self._level_overlay = LevelCompleteOverlay(self)
        self._level_overlay.next_requested.connect(self._session.advance)
        self._level_overlay.replay_requested.connect(self._session.replay)
        self._game_overlay = GameCompleteOverlay(self)
        self._game_overlay.closed.connect(self._show_categories)

        self.submit_shortcut = QShortcut(QKeySequence(Qt.Key_Return), self)
        self.submit_shortcut.activated.connect(self._session.submit_selection)
        self.clear_shortcut = QShortcut(QKeySequence(Qt.Key_Escape), self)
        self.clear_shortcut.activated.connect(self._session.clear_selection)

        if self._levels_repo.fallback_used:
            self.statusBar().showMessage("Could not load the level files; playing the built-in levels.", 5000)
        elif self._levels_repo.skipped_sources:
            skipped = ", ".join(self._levels_repo.skipped_sources)
            self.statusBar().showMessage(f"Some level files could not be loaded: {skipped}", 5000)

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------

    def _build_category_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(48, 48, 48, 48)
        layout.setSpacing(20)

        title = QLabel("Choose a category")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet(f"color: {PuzzleColors.PRIMARY_DARK}; font-size: 28px; font-weight: 900;")
        layout.addWidget(title)

        grid = QGridLayout()
        grid.setSpacing(16)
        for idx, category in enumerate(self._levels_repo.all()):
            button = QPushButton(f"{category.name}\n{len(category.levels)} levels")
            button.setMinimumHeight(96)
            button.setCursor(Qt.PointingHandCursor)
            button.setStyleSheet(
                f"""
                QPushButton {{
                    background: {PuzzleColors.CARD_BG};
                    color: {PuzzleColors.TEXT_PRIMARY};
                    border: 1px solid {PuzzleColors.TILE_BORDER};
                    border-radius: 16px;
                    font-size: 16px;
                    font-weight: 700;
                }}
                QPushButton:hover {{ border-color: {PuzzleColors.PRIMARY}; color: {PuzzleColors.PRIMARY}; }}
                """
            )
            button.clicked.connect(lambda _checked=False, key=category.key: self._start_category(key))
            row, col = divmod(idx, 3)
            grid.addWidget(button, row, col)
        layout.addLayout(grid)
        layout.addStretch(1)
        return screen

    def _build_game_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(18)

        header = QHBoxLayout()
        back_btn = QPushButton("← Categories")
        back_btn.setCursor(Qt.PointingHandCursor)
        back_btn.clicked.connect(self._show_categories)
        header.addWidget(back_btn, 0)

        self._level_label = QLabel("")
        self._level_label.setStyleSheet(f"color: {PuzzleColors.PRIMARY_DARK}; font-size: 20px; font-weight: 800;")
        header.addWidget(self._level_label, 1, Qt.AlignCenter)

        self._timer_label = QLabel(format_clock(0))
        self._timer_label.setStyleSheet(f"color: {PuzzleColors.TEXT_SECONDARY}; font-size: 18px; font-weight: 700;")
        header.addWidget(self._timer_label, 0)

        self._found_label = QLabel("")
        self._found_label.setStyleSheet(f"color: {PuzzleColors.TEXT_SECONDARY}; font-size: 16px;")
        header.addWidget(self._found_label, 0)

        self._mute_btn = QPushButton(self._mute_label())
        self._mute_btn.setCursor(Qt.PointingHandCursor)
        self._mute_btn.clicked.connect(self._toggle_mute)
        header.addWidget(self._mute_btn, 0)
        layout.addLayout(header)

        body = QHBoxLayout()
        body.setSpacing(24)
        board = QVBoxLayout()
        self._grid = TileGrid()
        self._grid.tile_clicked.connect(self._session.select_tile)
        board.addWidget(self._grid, 1)

        self._candidate_label = QLabel("")
        self._candidate_label.setAlignment(Qt.AlignCenter)
        self._candidate_label.setMinimumHeight(40)
        self._candidate_label.setStyleSheet(f"color: {PuzzleColors.PRIMARY}; font-size: 26px; font-weight: 900;")
        board.addWidget(self._candidate_label)

        controls = QHBoxLayout()
        for text, slot in (
            ("Check word", self._session.submit_selection),
            ("Clear", self._session.clear_selection),
            ("Hint", self._session.request_hint),
        ):
            button = QPushButton(text)
            button.setCursor(Qt.PointingHandCursor)
            button.setMinimumHeight(40)
            button.clicked.connect(lambda _checked=False, fn=slot: fn())
            controls.addWidget(button)
        board.addLayout(controls)
        body.addLayout(board, 3)

        self._clues = ClueListWidget()
        body.addWidget(self._clues, 2)
        layout.addLayout(body, 1)
        return screen

    def _mute_label(self) -> str:
        return "Sound: off" if self._sounds.muted else "Sound: on"

    def _toggle_mute(self) -> None:
        self._sounds.set_muted(not self._sounds.muted)
        self._mute_btn.setText(self._mute_label())

    def _start_category(self, key: str) -> None:
        self._category = self._levels_repo.get(key)
        self._stack.setCurrentWidget(self._game_screen)
        try:
            self._session.start(self._category.levels)
        except InvalidContent as e:
            logger.warning("Category %s is not playable: %s", key, e)
            self.statusBar().showMessage(f"{self._category.name} cannot be played.", 5000)
            self._show_categories()

    def _show_categories(self) -> None:
        self._session.stop()
        self._cancel_cosmetics()
        self._level_overlay.hide()
        self._game_overlay.hide()
        self._stack.setCurrentWidget(self._category_screen)

    def _cancel_cosmetics(self) -> None:
        self._hint_timer.stop()
        self._reject_timer.stop()
        self._grid.set_hinted(None)
        self._grid.set_rejected(())

    # ------------------------------------------------------------------
    # Session signal handlers
    # ------------------------------------------------------------------

    def _on_level_loaded(self, _index: int) -> None:
        self._cancel_cosmetics()
        level = self._session.current_level
        if level is None:
            return
        name = self._category.name if self._category is not None else ""
        self._level_label.setText(f"{name} · Level {level.ordinal}")
        self._timer_label.setText(format_clock(0))
        self._grid.set_tiles(self._session.tiles())
        self._refresh_board()

    def _refresh_selection(self) -> None:
        self._grid.sync(self._session.tiles())
        self._candidate_label.setText(self._session.candidate)

    def _refresh_board(self) -> None:
        self._refresh_selection()
        self._clues.set_clues(self._session.clue_list())
        progress = self._session.progress()
        self._found_label.setText(f"{progress.found_count}/{progress.total_count} found")

    def _on_word_found(self, _word: str) -> None:
        self._reject_timer.stop()
        self._grid.set_rejected(())
        self._refresh_board()

    def _on_word_rejected(self, _candidate: str) -> None:
        self._grid.set_rejected(self._session.selection)
        self._reject_timer.start()

    def _on_timer_tick(self, elapsed: int) -> None:
        self._timer_label.setText(format_clock(elapsed))

    def _on_hint_given(self, index: int) -> None:
        self._grid.set_hinted(index)
        self._hint_timer.start()

    def _on_level_complete(self, stars: int, elapsed: int) -> None:
        self._cancel_cosmetics()
        level = self._session.current_level
        if level is None:
            return
        self._found_label.setText(star_text(stars))
        self._level_overlay.present(level.ordinal, stars, elapsed, level.words)

    def _on_game_complete(self, _history: list) -> None:
        self._cancel_cosmetics()
        self._game_overlay.present(self._session.history)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._session.stop()
        super().closeEvent(event)

"""In-window overlays shown at the end of a level and at the end of the game."""

from __future__ import annotations

import html
from typing import Optional, Sequence

from PySide6.QtCore import Qt, QEvent, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from letterhunt.core.levels import WordEntry
from letterhunt.core.session import LevelRecord
from letterhunt.ui.colors import PuzzleColors, star_text


def _card_container(object_name: str, radius: int = 20) -> QFrame:
    container = QFrame()
    container.setObjectName(object_name)
    container.setMinimumWidth(420)
    container.setMaximumWidth(520)
    container.setStyleSheet(
        f"""
        QFrame#{object_name} {{
            background: #ffffff;
            border: 1px solid rgba(0, 131, 143, 0.12);
            border-radius: {radius}px;
        }}
        """
    )
    shadow = QGraphicsDropShadowEffect(container)
    shadow.setBlurRadius(20)
    shadow.setOffset(0, 6)
    shadow.setColor(QColor(0, 80, 100, 25))
    container.setGraphicsEffect(shadow)
    return container


def _button(text: str, primary: bool) -> QPushButton:
    button = QPushButton(text)
    if primary:
        style = f"""
            QPushButton {{
                background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                    stop:0 {PuzzleColors.PRIMARY_LIGHT}, stop:1 {PuzzleColors.PRIMARY});
                color: white;
                padding: 10px 16px;
                border: none;
                border-radius: 12px;
                font-weight: 600;
                font-size: 13px;
            }}
            QPushButton:hover {{ background: {PuzzleColors.PRIMARY}; }}
        """
    else:
        style = f"""
            QPushButton {{
                background: #fafafa;
                color: {PuzzleColors.TEXT_PRIMARY};
                padding: 10px 16px;
                border: 1px solid #e0e0e0;
                border-radius: 12px;
                font-weight: 600;
                font-size: 13px;
            }}
            QPushButton:hover {{
                background: #f0f0f0;
                border-color: {PuzzleColors.PRIMARY};
                color: {PuzzleColors.PRIMARY};
            }}
        """
    button.setStyleSheet(style)
    button.setCursor(Qt.CursorShape.PointingHandCursor)
    button.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
    return button


class _Overlay(QWidget):
    """Dimmed full-window backdrop that tracks its parent's size."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._grid = QGridLayout(self)
        self._grid.setContentsMargins(0, 0, 0, 0)
        self._grid.setSpacing(0)
        self._grid.setRowStretch(0, 1)
        self._grid.setColumnStretch(0, 1)

        backdrop = QWidget(self)
        backdrop.setStyleSheet("background: rgba(0, 0, 0, 0.2);")
        backdrop.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        backdrop.setMinimumSize(1, 1)
        self._grid.addWidget(backdrop, 0, 0)
        self.hide()

    def _set_card(self, card: QFrame) -> None:
        self._grid.addWidget(card, 0, 0, 1, 1, Qt.AlignCenter)

    def _update_geometry(self) -> None:
        parent = self.parentWidget()
        if parent is not None:
            self.setGeometry(parent.rect())

    def eventFilter(self, obj: QWidget, event: QEvent) -> bool:
        if obj is self.parentWidget() and event.type() == QEvent.Type.Resize:
            self._update_geometry()
        return super().eventFilter(obj, event)

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self._update_geometry()
        self.raise_()
        parent = self.parentWidget()
        if parent is not None:
            parent.installEventFilter(self)

    def hideEvent(self, event) -> None:
        parent = self.parentWidget()
        if parent is not None:
            parent.removeEventFilter(self)
        super().hideEvent(event)


class LevelCompleteOverlay(_Overlay):
    """Stars, time and word definitions for a finished level."""

    next_requested = Signal()
    replay_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        card = _card_container("levelCompleteCard")
        content = QVBoxLayout(card)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(14)

        self._title = QLabel("Level complete!")
        self._title.setStyleSheet(f"color: {PuzzleColors.PRIMARY}; font-size: 20px; font-weight: 800;")
        content.addWidget(self._title)

        self._stars = QLabel("")
        self._stars.setStyleSheet(f"color: {PuzzleColors.STAR_ON}; font-size: 32px;")
        self._stars.setAlignment(Qt.AlignCenter)
        content.addWidget(self._stars)

        self._time = QLabel("")
        self._time.setStyleSheet(f"color: {PuzzleColors.TEXT_SECONDARY}; font-size: 14px;")
        self._time.setAlignment(Qt.AlignCenter)
        content.addWidget(self._time)

        self._definitions = QLabel("")
        self._definitions.setWordWrap(True)
        self._definitions.setTextFormat(Qt.RichText)
        self._definitions.setStyleSheet(f"color: {PuzzleColors.TEXT_PRIMARY}; font-size: 14px;")
        content.addWidget(self._definitions)

        buttons = QHBoxLayout()
        buttons.setSpacing(10)
        replay_btn = _button("Replay", primary=False)
        replay_btn.clicked.connect(lambda: (self.hide(), self.replay_requested.emit()))
        next_btn = _button("Next level", primary=True)
        next_btn.clicked.connect(lambda: (self.hide(), self.next_requested.emit()))
        buttons.addWidget(replay_btn)
        buttons.addWidget(next_btn)
        content.addLayout(buttons)

        self._set_card(card)

    def present(self, ordinal: int, stars: int, elapsed_seconds: int, words: Sequence[WordEntry]) -> None:
        self._title.setText(f"Level {ordinal} complete!")
        self._stars.setText(star_text(stars))
        self._time.setText(f"Time: {format_clock(elapsed_seconds)}")
        self._definitions.setText(
            "<br>".join(f"<b>{html.escape(w.word)}</b>: {html.escape(w.definition)}" for w in words)
        )
        self.show()


class GameCompleteOverlay(_Overlay):
    """Summary of every completed level once the last one is done."""

    closed = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        card = _card_container("gameCompleteCard")
        content = QVBoxLayout(card)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(14)

        title = QLabel("Congratulations! You've completed all levels!")
        title.setWordWrap(True)
        title.setStyleSheet(f"color: {PuzzleColors.PRIMARY}; font-size: 18px; font-weight: 800;")
        content.addWidget(title)

        self._summary = QLabel("")
        self._summary.setTextFormat(Qt.RichText)
        self._summary.setStyleSheet(f"color: {PuzzleColors.TEXT_PRIMARY}; font-size: 14px;")
        content.addWidget(self._summary)

        ok_btn = _button("Choose another category", primary=True)
        ok_btn.clicked.connect(lambda: (self.hide(), self.closed.emit()))
        content.addWidget(ok_btn)

        self._set_card(card)

    def present(self, history: Sequence[LevelRecord]) -> None:
        rows = [
            f"Level {r.level_ordinal}: {star_text(r.star_rating)} in {format_clock(r.elapsed_seconds)}"
            for r in history
        ]
        self._summary.setText("<br>".join(rows) or "No levels completed.")
        self.show()


def format_clock(seconds: int) -> str:
    """Format seconds as M:SS."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"

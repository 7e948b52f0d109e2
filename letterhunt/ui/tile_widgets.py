"""Board widgets: letter tiles, tile grid and the clue list."""

from __future__ import annotations

import html
from typing import Optional, Sequence

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QFrame, QGridLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from letterhunt.core.session import Clue, Tile, TileState
from letterhunt.ui.colors import PuzzleColors, blend_hex


class TileButton(QPushButton):
    """A single letter tile. Visual state only; clicks are routed by TileGrid."""

    def __init__(self, tile: Tile, parent: Optional[QWidget] = None) -> None:
        super().__init__(tile.letter, parent)
        self._index = tile.index
        self._state = tile.state
        self._hinted = False
        self._rejected = False
        self.setFixedSize(56, 56)
        self.setCursor(Qt.PointingHandCursor)
        self._restyle()

    @property
    def index(self) -> int:
        return self._index

    def set_tile_state(self, state: TileState) -> None:
        self._state = state
        self.setEnabled(state is not TileState.USED)
        self._restyle()

    def set_hinted(self, hinted: bool) -> None:
        self._hinted = hinted
        self._restyle()

    def set_rejected(self, rejected: bool) -> None:
        self._rejected = rejected
        self._restyle()

    def _restyle(self) -> None:
        if self._state is TileState.USED:
            bg, fg, border = PuzzleColors.TILE_USED, PuzzleColors.TEXT_MUTED, PuzzleColors.TILE_USED
        elif self._rejected:
            bg, fg, border = PuzzleColors.TILE_REJECTED, "white", PuzzleColors.TILE_REJECTED
        elif self._state is TileState.SELECTED:
            bg, fg, border = PuzzleColors.TILE_SELECTED, "white", PuzzleColors.PRIMARY_DARK
        elif self._hinted:
            bg, fg, border = PuzzleColors.TILE_HINT, PuzzleColors.TEXT_PRIMARY, PuzzleColors.AMBER
        else:
            bg, fg, border = PuzzleColors.TILE_BG, PuzzleColors.TEXT_PRIMARY, PuzzleColors.TILE_BORDER
        hover = blend_hex(bg, PuzzleColors.PRIMARY, 0.15)
        self.setStyleSheet(
            f"""
            QPushButton {{
                background: {bg};
                color: {fg};
                border: 2px solid {border};
                border-radius: 12px;
                font-size: 22px;
                font-weight: 800;
            }}
            QPushButton:hover {{ background: {hover}; }}
            """
        )


class TileGrid(QWidget):
    """Grid of TileButtons rebuilt for every level."""

    tile_clicked = Signal(int)

    def __init__(self, columns: int = 8, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._columns = columns
        self._buttons: dict[int, TileButton] = {}
        self._layout = QGridLayout(self)
        self._layout.setSpacing(8)
        self._layout.setAlignment(Qt.AlignCenter)

    def set_tiles(self, tiles: Sequence[Tile]) -> None:
        while self._layout.count():
            item = self._layout.takeAt(0)
            w = item.widget()
            if w is not None:
                w.setParent(None)
                w.deleteLater()
        self._buttons = {}
        for tile in tiles:
            button = TileButton(tile, self)
            button.clicked.connect(lambda _checked=False, i=tile.index: self.tile_clicked.emit(i))
            row, col = divmod(tile.index, self._columns)
            self._layout.addWidget(button, row, col)
            self._buttons[tile.index] = button

    def sync(self, tiles: Sequence[Tile]) -> None:
        """Refresh every button's state from the session's tiles."""
        for tile in tiles:
            button = self._buttons.get(tile.index)
            if button is not None:
                button.set_tile_state(tile.state)

    def set_hinted(self, index: Optional[int]) -> None:
        for i, button in self._buttons.items():
            button.set_hinted(i == index)

    def set_rejected(self, indices: Sequence[int]) -> None:
        flagged = set(indices)
        for i, button in self._buttons.items():
            button.set_rejected(i in flagged)


class ClueListWidget(QFrame):
    """Vertical list of clues with the revealed word or a blank pattern."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("cluePanel")
        self.setStyleSheet(
            f"""
            QFrame#cluePanel {{
                background: {PuzzleColors.CARD_BG};
                border-radius: 16px;
            }}
            """
        )
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(18, 16, 18, 16)
        self._layout.setSpacing(10)

    def set_clues(self, clues: Sequence[Clue]) -> None:
        while self._layout.count():
            item = self._layout.takeAt(0)
            w = item.widget()
            if w is not None:
                w.setParent(None)
                w.deleteLater()
        for clue in clues:
            solved = "_" not in clue.display
            label = QLabel(f"{html.escape(clue.clue)}: <b>{clue.display}</b>")
            label.setWordWrap(True)
            color = PuzzleColors.PRIMARY if solved else PuzzleColors.TEXT_PRIMARY
            label.setStyleSheet(f"color: {color}; font-size: 15px;")
            self._layout.addWidget(label)
        self._layout.addStretch(1)

"""Theme colors and color utilities for the puzzle board."""

from typing import Optional


class PuzzleColors:
    """Light theme palette for the board, clues and overlays."""

    BG_TOP = "#e0f7fa"
    BG_BOTTOM = "#80deea"

    PRIMARY = "#00838f"
    PRIMARY_LIGHT = "#4fb3bf"
    PRIMARY_DARK = "#005662"

    CORAL = "#ff8a65"
    AMBER = "#ffb74d"
    MINT = "#69f0ae"

    TILE_BG = "#ffffff"
    TILE_BORDER = "#b2ebf2"
    TILE_SELECTED = PRIMARY
    TILE_USED = "#cfd8dc"
    TILE_HINT = AMBER
    TILE_REJECTED = CORAL

    CARD_BG = "rgba(255, 255, 255, 0.85)"

    TEXT_PRIMARY = "#1a3a3a"
    TEXT_SECONDARY = "#4a6572"
    TEXT_MUTED = "#78909c"

    STAR_ON = "#ffb300"
    STAR_OFF = "#cfd8dc"


def _rgb(color: str) -> Optional[tuple[int, int, int]]:
    color = color.strip()
    if not (color.startswith("#") and len(color) == 7):
        return None
    try:
        return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)
    except ValueError:
        return None


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b. Malformed input returns a."""
    start, end = _rgb(a), _rgb(b)
    if start is None or end is None:
        return a
    t = max(0.0, min(1.0, float(t)))
    mixed = (int(s + (e - s) * t) for s, e in zip(start, end))
    return "#{:02X}{:02X}{:02X}".format(*mixed)


def star_text(stars: int, total: int = 3) -> str:
    """Render a star rating as filled/empty star glyphs."""
    stars = max(0, min(total, int(stars)))
    return "★" * stars + "☆" * (total - stars)

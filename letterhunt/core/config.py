"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from letterhunt.core.session import RELAXED_THRESHOLDS, STRICT_THRESHOLDS, StarThresholds

logger = logging.getLogger(__name__)

STAR_PROFILES: dict[str, StarThresholds] = {
    "strict": STRICT_THRESHOLDS,
    "relaxed": RELAXED_THRESHOLDS,
}


@dataclass(frozen=True)
class GameConfig:
    thresholds: StarThresholds = STRICT_THRESHOLDS
    content_document: Optional[Path] = None
    muted: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Build a config from ``LETTERHUNT_*`` variables (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        profile = env.get("LETTERHUNT_STAR_PROFILE", "strict").strip().lower()
        thresholds = STAR_PROFILES.get(profile)
        if thresholds is None:
            logger.warning("Unknown star profile %r, using 'strict'", profile)
            thresholds = STRICT_THRESHOLDS

        document = env.get("LETTERHUNT_CONTENT", "").strip()
        return cls(
            thresholds=thresholds,
            content_document=Path(document).expanduser() if document else None,
            muted=env.get("LETTERHUNT_MUTE") == "1",
        )

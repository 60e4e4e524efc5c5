"""
Engine configuration and logging setup.

EngineConfig holds the tunables of a session controller that are not part
of the game content itself (content-level start conditions live in
data_models.GameConfig).
"""

import logging
from dataclasses import dataclass
from typing import Optional


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


# =============================================================================
# CONFIGURATION
# =============================================================================

DEFAULT_LOCALE = "en"
SAVE_FORMAT_VERSION = "1.0"
NARRATOR_LABEL = "Narrator"


@dataclass
class EngineConfig:
    """Configuration for an engine session."""
    default_locale: str = DEFAULT_LOCALE
    narrator_label: str = NARRATOR_LABEL
    save_version: str = SAVE_FORMAT_VERSION
    interlude_scroll: bool = True
    interlude_scroll_speed: int = 30
    map_enabled: bool = True
    seed: Optional[int] = None
    max_dialogue_redirects: int = 8

    def __post_init__(self):
        if not self.default_locale:
            raise ValueError("default_locale must not be empty")
        if self.interlude_scroll_speed < 0:
            raise ValueError(
                f"interlude_scroll_speed must be >= 0, got {self.interlude_scroll_speed}"
            )
        if self.max_dialogue_redirects < 1:
            raise ValueError(
                f"max_dialogue_redirects must be >= 1, got {self.max_dialogue_redirects}"
            )

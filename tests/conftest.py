"""
Pytest fixtures for the narrative engine test suite.

Provides reusable fixtures for content, configuration, dice and engines.
"""

import pytest

from narrative_engine.config import EngineConfig
from narrative_engine.dice import DiceRoller
from narrative_engine.engine import Engine
from narrative_engine.observability.run_log import RunLog

from tests.helpers import build_registry, make_state, sample_game_config


# =============================================================================
# DICE FIXTURES
# =============================================================================


@pytest.fixture
def seeded_dice():
    """Provide a seeded DiceRoller for reproducible tests."""
    return DiceRoller(seed=42)


class FixedDice(DiceRoller):
    """DiceRoller that always draws the same value (clamped to the range)."""

    def __init__(self, value: int):
        super().__init__()
        self.value = value

    def _draw(self, low: int, high: int) -> int:
        return max(low, min(high, self.value))


@pytest.fixture
def fixed_dice():
    """Factory for dice that always roll a given value."""
    return FixedDice


# =============================================================================
# CONTENT FIXTURES
# =============================================================================


@pytest.fixture
def registry():
    """Sample content registry (tavern, market, forest)."""
    return build_registry()


@pytest.fixture
def game_config():
    """Start in the tavern with 100 gold."""
    return sample_game_config()


@pytest.fixture
def base_state():
    """Minimal state at the tavern."""
    return make_state()


# =============================================================================
# ENGINE FIXTURES
# =============================================================================


@pytest.fixture
def run_log():
    return RunLog()


@pytest.fixture
def engine(registry, seeded_dice, run_log):
    """Engine over the sample registry; call new_game() to start."""
    return Engine(registry, config=EngineConfig(), dice=seeded_dice, run_log=run_log)


@pytest.fixture
def started_engine(engine, game_config):
    """Engine with a new game already started in the tavern."""
    engine.new_game(game_config)
    return engine

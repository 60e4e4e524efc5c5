"""
Test helpers for the narrative engine test suite.

Provides sample dialogue scripts and a builder for a small content
registry (tavern, market, forest) used across engine and snapshot tests.
"""

from typing import Any, Optional

from narrative_engine.data_models import ContentRegistry, GameConfig
from narrative_engine.game_state.state import GameState, GameTime


# =============================================================================
# SAMPLE DIALOGUE SCRIPTS
# =============================================================================

BARTENDER_DIALOGUE = """
# Talk-only conversation with the bartender

NODE start
  BARTENDER: @bartender.greeting
  VOICE bartender_hello.ogg
  CHOICE "Buy a drink"
    REQUIRE variableGreaterThan gold 5
    ADD variable gold -5
    NOTIFY "Paid 5 gold"
    SOUND coins.ogg
    GOTO drink
  END
  CHOICE @bartender.ask_rumors
    GOTO rumors
  END
  CHOICE "Head to the market"
    GOTO location market
  END
  CHOICE "Goodbye"
  END

NODE drink
  BARTENDER: "Here you go, {playerName}."
  CHOICE "Thanks"
    GOTO start
  END

NODE rumors
  NARRATOR: The bartender leans in.
  SET flag heardRumors
  IF hasFlag knowsSecret
    GOTO secret
  END
  GOTO farewell

NODE secret
  BARTENDER: "So you already know."

NODE farewell
  BARTENDER: "Safe travels."
"""

SHOP_DIALOGUE = """
NODE start
  MERCHANT: "Fine wares, friend."
  CHOICE "Buy the map"
    ADD variable gold -50
    NOTIFY "Bought a map"
    GOTO check
  END
  CHOICE "Ask about the forest"
    START dialogue forest_lore
  END

NODE check
  NARRATOR: "You count your coins."
  IF variableGreaterThan gold 1000
    GOTO rich
  END
  IF variableLessThan gold 100
    GOTO poorer
  END

NODE rich
  MERCHANT: "A wealthy customer!"

NODE poorer
  MERCHANT: "Pleasure doing business."
  CHOICE "Leave"
  END
"""

FOREST_LORE_DIALOGUE = """
NODE start
  MERCHANT: "The forest is old."
  ADD journalEntry forest_lore
  CHOICE "Go on"
    GOTO more
  END

NODE more
  MERCHANT: "Few return."
"""

MARKET_WELCOME_DIALOGUE = """
TRIGGER market
REQUIRE notFlag visitedMarket

NODE start
  NARRATOR: "The market bustles with life."
  SET flag visitedMarket
  CHOICE "Look around"
  END
"""


# =============================================================================
# REGISTRY BUILDER
# =============================================================================


def sample_content() -> dict[str, Any]:
    """Content in the dictionary form accepted by ContentRegistry.from_dict."""
    return {
        "locations": [
            {
                "id": "tavern",
                "name": "@location.tavern.name",
                "description": "A warm room that smells of ale.",
                "banner": "tavern_banner.png",
                "music": "tavern_theme.ogg",
                "ambient": "crowd.ogg",
            },
            {"id": "market", "name": "Market Square", "description": "Stalls everywhere."},
            {"id": "forest", "name": "Dark Forest", "description": "Tall pines."},
        ],
        "characters": [
            {
                "id": "bartender",
                "name": "@character.bartender.name",
                "biography": "Runs the tavern.",
                "portrait": "bartender.png",
                "location": "tavern",
                "dialogue": "bartender",
                "stats": {"mood": 5},
            },
            {
                "id": "merchant",
                "name": "Mira",
                "portrait": "mira.png",
                "location": "market",
                "dialogue": "shop",
            },
            {"id": "guide", "name": "Rowan", "location": "forest"},
        ],
        "items": [
            {"id": "old_key", "name": "Old Key", "description": "Rusty.", "location": "tavern"},
            {"id": "coin_purse", "name": "Coin Purse", "location": "market"},
            {"id": "lantern", "name": "Lantern", "location": "forest", "stats": {"fuel": 3}},
        ],
        "maps": [
            {
                "id": "region",
                "name": "The Region",
                "image": "region.png",
                "scale": 0.1,
                "locations": [
                    {"id": "tavern", "x": 0, "y": 0},
                    {"id": "market", "x": 30, "y": 40},
                    {"id": "forest", "x": 60, "y": 80},
                ],
            }
        ],
        "dialogues": {
            "bartender": BARTENDER_DIALOGUE,
            "shop": SHOP_DIALOGUE,
            "forest_lore": FOREST_LORE_DIALOGUE,
            "market_welcome": MARKET_WELCOME_DIALOGUE,
        },
        "quests": [
            {
                "id": "main_quest",
                "name": "The Locked Door",
                "description": "Find a way in.",
                "stages": [
                    {"id": "find_key", "description": "Find the key."},
                    {"id": "open_door", "description": "Open the door with {keyName}."},
                ],
            }
        ],
        "journal_entries": [
            {"id": "forest_lore", "title": "The Forest", "text": "Few return.", "category": "lore"},
        ],
        "interludes": [
            {
                "id": "forest_arrival",
                "background": "forest_bg.png",
                "text": "@interlude.forest",
                "music": "forest.ogg",
                "sounds": ["owl.ogg"],
                "trigger_location": "forest",
                "trigger_conditions": ["notFlag seenForest"],
                "effects": ["SET flag seenForest"],
            }
        ],
        "locales": {
            "en": {
                "location.tavern.name": "The Rusty Tankard",
                "character.bartender.name": "Greta",
                "bartender.greeting": "Welcome, {playerName}!",
                "bartender.ask_rumors": "Heard any rumors?",
                "interlude.forest": "The trees close in.",
            },
            "es": {
                "location.tavern.name": "La Jarra Oxidada",
                "bartender.greeting": "Bienvenido, {playerName}!",
            },
        },
    }


def build_registry(overrides: Optional[dict[str, Any]] = None) -> ContentRegistry:
    """Build the sample registry, replacing whole collections from overrides."""
    content = sample_content()
    content.update(overrides or {})
    return ContentRegistry.from_dict(content)


def sample_game_config(**changes: Any) -> GameConfig:
    """Start in the tavern at Day 1, 10:00 with 100 gold."""
    values = {
        "start_location": "tavern",
        "start_time": GameTime(day=1, hour=10),
        "start_flags": {},
        "start_variables": {"gold": 100, "playerName": "Hero"},
        "start_inventory": (),
    }
    values.update(changes)
    return GameConfig(**values)


def make_state(**changes: Any) -> GameState:
    """A minimal state at the tavern for condition and effect tests."""
    values: dict[str, Any] = {"current_location": "tavern"}
    values.update(changes)
    return GameState(**values)

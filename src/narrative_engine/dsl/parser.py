"""
Dialogue script parser.

Compiles .dlg source into a Dialogue graph:

    TRIGGER tavern                    # optional, once
    REQUIRE notFlag metBartender      # optional, repeatable

    NODE start
      BARTENDER: @bartender.greeting
      VOICE bartender_hello.ogg
      CHOICE @bartender.ask_rumors
        REQUIRE variableGreaterThan gold 5
        ADD variable gold -5
        GOTO rumors
      END
      IF hasFlag knowsSecret
        GOTO secret
      END
      SET flag metBartender
      GOTO farewell                   # or: GOTO location market

CHOICE and IF blocks close on an END line at the same indentation as the
block opener. The first NODE is the start node. A speaker line is any run of
non-space characters up to the first ':', e.g. OLD-MAN: or NARRATOR:.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from narrative_engine.conditions.types import Condition
from narrative_engine.data_models import Choice, ConditionalBranch, Dialogue, DialogueNode
from narrative_engine.dsl.errors import DialogueSyntaxError
from narrative_engine.dsl.expressions import parse_condition, parse_effect, parse_text
from narrative_engine.dsl.tokenizer import Token, tokenize
from narrative_engine.effects.types import EndDialogueEffect, Effect, GoToLocationEffect

logger = logging.getLogger(__name__)

NARRATOR = "NARRATOR"
CHOICE_ID_LENGTH = 30

_SPEAKER_LINE = re.compile(r"^([^\s:]+):(.*)$")
_NON_ALNUM = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def make_choice_id(node_id: str, text: str) -> str:
    """
    Derive a stable choice id from its node id and text.

    '@' and '"' are dropped, every other non-alphanumeric character becomes
    '_', and the result is lower-cased and cut to 30 characters.
    """
    sanitized = text.replace("@", "").replace('"', "")
    sanitized = _NON_ALNUM.sub("_", sanitized)
    return f"{node_id}_choice_{sanitized.lower()[:CHOICE_ID_LENGTH]}"


def _location_exit(location_id: str) -> list[Effect]:
    """GOTO location <id>: move there and end the dialogue."""
    return [GoToLocationEffect(location_id=location_id), EndDialogueEffect()]


@dataclass
class _IfBlock:
    condition: Condition
    next: Optional[str] = None
    effects: list[Effect] = field(default_factory=list)


class DialogueParser:
    """
    Recursive-descent parser over tokens of one dialogue script.

    Args:
        source: Raw script text
        dialogue_id: Id given to the compiled dialogue
    """

    def __init__(self, source: str, dialogue_id: str):
        self.dialogue_id = dialogue_id
        self.tokens: list[Token] = tokenize(source)
        self.position = 0

    def parse(self) -> Dialogue:
        """Compile the whole script."""
        trigger_location: Optional[str] = None
        conditions: list[Condition] = []
        nodes: list[DialogueNode] = []
        seen_nodes: set[str] = set()

        while self.position < len(self.tokens):
            token = self.tokens[self.position]
            keyword = token.keyword

            if keyword == "TRIGGER":
                if trigger_location is not None:
                    raise DialogueSyntaxError("Duplicate TRIGGER", token.line_number)
                trigger_location = self._single_argument(token)
                self.position += 1
            elif keyword == "REQUIRE":
                conditions.append(self._require(token))
                self.position += 1
            elif keyword == "NODE":
                node = self._parse_node()
                if node.id in seen_nodes:
                    raise DialogueSyntaxError(
                        f"Duplicate node id: {node.id}", token.line_number
                    )
                seen_nodes.add(node.id)
                nodes.append(node)
            else:
                raise DialogueSyntaxError(
                    f"Unexpected token at line {token.line_number}: {token.line}",
                    token.line_number,
                )

        if not nodes:
            raise DialogueSyntaxError(f"Dialogue '{self.dialogue_id}' has no NODE")

        dialogue = Dialogue(
            id=self.dialogue_id,
            start_node=nodes[0].id,
            nodes=tuple(nodes),
            trigger_location=trigger_location,
            conditions=tuple(conditions),
        )
        logger.debug(
            f"Compiled dialogue '{self.dialogue_id}': {len(nodes)} nodes, "
            f"trigger={trigger_location}"
        )
        return dialogue

    # =========================================================================
    # NODES
    # =========================================================================

    def _parse_node(self) -> DialogueNode:
        opener = self.tokens[self.position]
        node_id = self._single_argument(opener)
        self.position += 1

        speaker: Optional[str] = None
        text = ""
        has_speaker_line = False
        voice: Optional[str] = None
        portrait: Optional[str] = None
        choices: list[Choice] = []
        effects: list[Effect] = []
        branches: list[ConditionalBranch] = []
        next_node: Optional[str] = None
        has_goto = False

        while self.position < len(self.tokens):
            token = self.tokens[self.position]
            keyword = token.keyword

            if keyword == "NODE":
                break

            speaker_match = _SPEAKER_LINE.match(token.line)
            if speaker_match:
                if has_speaker_line:
                    raise DialogueSyntaxError(
                        f"Node '{node_id}' has more than one speaker line",
                        token.line_number,
                    )
                has_speaker_line = True
                name = speaker_match.group(1)
                speaker = None if name == NARRATOR else name.lower()
                text = parse_text(speaker_match.group(2))
                self.position += 1
            elif keyword == "VOICE":
                voice = self._free_argument(token)
                self.position += 1
            elif keyword == "PORTRAIT":
                portrait = self._free_argument(token)
                self.position += 1
            elif keyword == "CHOICE":
                choice = self._parse_choice(node_id)
                if any(existing.id == choice.id for existing in choices):
                    raise DialogueSyntaxError(
                        f"Duplicate choice id '{choice.id}' in node '{node_id}'",
                        token.line_number,
                    )
                choices.append(choice)
            elif keyword == "IF":
                block = self._parse_if_block()
                if block.next:
                    branches.append(ConditionalBranch(condition=block.condition, next=block.next))
                # IF-block effects run whenever the node is reached
                effects.extend(block.effects)
            elif keyword == "GOTO":
                if has_goto:
                    raise DialogueSyntaxError(
                        f"Node '{node_id}' has more than one GOTO", token.line_number
                    )
                has_goto = True
                target, location = self._goto_target(token)
                if location is not None:
                    effects.extend(_location_exit(location))
                else:
                    next_node = target
                self.position += 1
            else:
                effects.append(parse_effect(token.line, token.line_number))
                self.position += 1

        return DialogueNode(
            id=node_id,
            speaker=speaker,
            text=text,
            voice=voice,
            portrait=portrait,
            choices=tuple(choices),
            effects=tuple(effects),
            conditional_next=tuple(branches),
            next=next_node,
        )

    # =========================================================================
    # BLOCKS
    # =========================================================================

    def _parse_choice(self, node_id: str) -> Choice:
        opener = self.tokens[self.position]
        raw_text = opener.rest
        if not raw_text:
            raise DialogueSyntaxError("CHOICE needs text", opener.line_number)
        choice_text = parse_text(raw_text)
        self.position += 1

        conditions: list[Condition] = []
        effects: list[Effect] = []
        next_node = ""
        has_route = False

        for token in self._block_body(opener, "CHOICE"):
            keyword = token.keyword
            if keyword == "REQUIRE":
                conditions.append(self._require(token))
            elif keyword == "GOTO":
                if has_route:
                    raise DialogueSyntaxError(
                        "CHOICE has more than one GOTO", token.line_number
                    )
                has_route = True
                target, location = self._goto_target(token)
                if location is not None:
                    effects.extend(_location_exit(location))
                else:
                    next_node = target
            elif _SPEAKER_LINE.match(token.line):
                # Choices carry no dialogue line of their own
                logger.debug(f"Ignoring speaker line in choice at line {token.line_number}")
            else:
                effects.append(parse_effect(token.line, token.line_number))

        return Choice(
            id=make_choice_id(node_id, choice_text),
            text=choice_text,
            next=next_node,
            conditions=tuple(conditions),
            effects=tuple(effects),
        )

    def _parse_if_block(self) -> _IfBlock:
        opener = self.tokens[self.position]
        if not opener.rest:
            raise DialogueSyntaxError("IF needs a condition", opener.line_number)
        block = _IfBlock(condition=parse_condition(opener.rest, opener.line_number))
        self.position += 1

        for token in self._block_body(opener, "IF"):
            if token.keyword == "GOTO":
                if block.next is not None:
                    raise DialogueSyntaxError(
                        "IF block has more than one GOTO", token.line_number
                    )
                target, location = self._goto_target(token)
                if location is not None:
                    raise DialogueSyntaxError(
                        "GOTO location is not allowed inside IF", token.line_number
                    )
                block.next = target
            else:
                block.effects.append(parse_effect(token.line, token.line_number))
        return block

    def _block_body(self, opener: Token, kind: str):
        """
        Yield tokens up to the END that closes the opener.

        The closing END must sit at the opener's indentation. Running into
        a NODE or the end of input first is an error.
        """
        while self.position < len(self.tokens):
            token = self.tokens[self.position]
            if token.line == "END" and token.indent == opener.indent:
                self.position += 1
                return
            if token.keyword == "NODE":
                break
            self.position += 1
            yield token
        raise DialogueSyntaxError(
            f"{kind} block opened here is missing its END", opener.line_number
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _require(self, token: Token) -> Condition:
        if not token.rest:
            raise DialogueSyntaxError("REQUIRE needs a condition", token.line_number)
        return parse_condition(token.rest, token.line_number)

    def _single_argument(self, token: Token) -> str:
        parts = token.line.split()
        if len(parts) != 2:
            raise DialogueSyntaxError(
                f"{token.keyword} expects exactly one argument", token.line_number
            )
        return parts[1]

    def _free_argument(self, token: Token) -> str:
        if not token.rest:
            raise DialogueSyntaxError(f"{token.keyword} needs a value", token.line_number)
        return token.rest

    def _goto_target(self, token: Token) -> tuple[str, Optional[str]]:
        """Return (node target, location id) for a GOTO line."""
        parts = token.line.split()
        if len(parts) == 3 and parts[1] == "location":
            return "", parts[2]
        if len(parts) != 2:
            raise DialogueSyntaxError(
                "GOTO expects a node id or 'location <id>'", token.line_number
            )
        return parts[1], None


def parse_dialogue(source: str, dialogue_id: str) -> Dialogue:
    """
    Compile dialogue source into a Dialogue graph.

    Args:
        source: The DSL source code
        dialogue_id: The dialogue ID

    Returns:
        A complete Dialogue entity

    Raises:
        DialogueSyntaxError: With the offending line number
    """
    return DialogueParser(source, dialogue_id).parse()

"""Dialogue script compiler: tokenizer, expression compiler and parser."""

from narrative_engine.dsl.errors import DialogueSyntaxError
from narrative_engine.dsl.expressions import (
    coerce_number,
    parse_condition,
    parse_effect,
    parse_text,
    parse_value,
)
from narrative_engine.dsl.parser import DialogueParser, make_choice_id, parse_dialogue
from narrative_engine.dsl.tokenizer import Token, strip_comment, tokenize

__all__ = [
    "DialogueParser",
    "DialogueSyntaxError",
    "Token",
    "coerce_number",
    "make_choice_id",
    "parse_condition",
    "parse_dialogue",
    "parse_effect",
    "parse_text",
    "parse_value",
    "strip_comment",
    "tokenize",
]

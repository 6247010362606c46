"""
Yes/no prompts.

Answers are parsed permissively: a fixed set of affirmative tokens is
accepted case-insensitively and anything else counts as "no", including
typos on mandatory prompts.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Callable

from .logging_config import get_logger


AFFIRMATIVE_TOKENS = frozenset({"y", "yes", "true"})
NEGATIVE_TOKENS = frozenset({"n", "no", "false"})


class Answer(Enum):
    AFFIRMATIVE = "affirmative"
    NEGATIVE = "negative"
    UNRECOGNIZED = "unrecognized"


def parse_answer(text: str | None) -> Answer:
    """Classify free-text input as affirmative, negative or unrecognized."""
    token = (text or "").strip().lower()
    if token in AFFIRMATIVE_TOKENS:
        return Answer.AFFIRMATIVE
    if token in NEGATIVE_TOKENS:
        return Answer.NEGATIVE
    return Answer.UNRECOGNIZED


def is_affirmative(text: str | None) -> bool:
    """Unrecognized answers are treated as negative."""
    return parse_answer(text) is Answer.AFFIRMATIVE


def ask_yes_no(
    question: str,
    unattended: bool = False,
    default: bool = False,
    input_func: Callable[[str], str] = input,
) -> bool:
    """
    Ask a yes/no question.

    Args:
        question: Question text, without the [y/N] suffix
        unattended: Return default without prompting
        default: Answer used in unattended mode
        input_func: Reads one line of input (injectable for tests)

    Returns:
        True only if the user answered with an affirmative token
    """
    if unattended:
        get_logger().info(f"{question} -> {'yes' if default else 'no'} (unattended)")
        return default

    try:
        response = input_func(f"{question} [y/N] ")
    except (EOFError, KeyboardInterrupt):
        print("", file=sys.stderr)
        return False

    answer = parse_answer(response)
    if answer is Answer.UNRECOGNIZED and response.strip():
        get_logger().debug(f"Unrecognized answer {response!r}, treating as no")
    return answer is Answer.AFFIRMATIVE

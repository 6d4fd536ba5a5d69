"""Confirmation providers for destructive operations.

The engine never reads from the terminal directly; it asks a
ConfirmationProvider. The CLI uses TyperConfirmation, or
AssumeYesConfirmation under ``--yes``; tests use StaticConfirmation.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

import typer

from workctl.utils.formatting import print_warning

logger = logging.getLogger(__name__)

# Answers accepted as an explicit refusal at a phrase prompt
_NO_ANSWERS = frozenset({"n", "no"})


class ConfirmationProvider(Protocol):
    """Source of yes/no answers for destructive operations."""

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question. Returns True only for an explicit yes."""
        ...

    def confirm_phrase(self, prompt: str, phrase: str) -> bool:
        """Ask the user to type an exact phrase. Returns True on a match."""
        ...


class TyperConfirmation:
    """Interactive confirmation on the controlling terminal.

    ``confirm`` relies on Click, which re-prompts until it gets a valid
    y/n answer. ``confirm_phrase`` loops until the phrase is typed
    exactly or the user answers no.
    """

    def confirm(self, prompt: str) -> bool:
        answer = typer.confirm(prompt, default=False)
        logger.info("Confirmation %r answered %s", prompt, "yes" if answer else "no")
        return answer

    def confirm_phrase(self, prompt: str, phrase: str) -> bool:
        while True:
            answer = typer.prompt(
                f"{prompt} (type '{phrase}' or 'no')",
                default="",
                show_default=False,
            )
            if answer == phrase:
                logger.info("Confirmation phrase accepted")
                return True
            if answer.strip().lower() in _NO_ANSWERS:
                logger.info("Confirmation phrase declined")
                return False
            print_warning(f"Please type '{phrase}' exactly, or 'no' to cancel.")


class AssumeYesConfirmation(TyperConfirmation):
    """Answers yes/no questions with yes but still asks for typed phrases.

    Used by ``--yes``: a complete removal keeps its typed confirmation.
    """

    def confirm(self, prompt: str) -> bool:
        logger.info("Confirmation %r assumed yes", prompt)
        return True


class StaticConfirmation:
    """Scripted confirmation answers.

    Args:
        answers: Answers returned in order. The last answer repeats once
            the sequence is exhausted. A single bool answers everything.

    Attributes:
        prompts: Every prompt that was asked, in order.
    """

    def __init__(self, answers: bool | Iterable[bool] = True) -> None:
        self._answers = [answers] if isinstance(answers, bool) else list(answers)
        if not self._answers:
            msg = "StaticConfirmation needs at least one answer"
            raise ValueError(msg)
        self.prompts: list[str] = []

    def confirm(self, prompt: str) -> bool:
        return self._next(prompt)

    def confirm_phrase(self, prompt: str, phrase: str) -> bool:
        return self._next(prompt)

    def _next(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        if len(self._answers) > 1:
            return self._answers.pop(0)
        return self._answers[0]

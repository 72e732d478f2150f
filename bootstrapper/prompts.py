"""
prompts.py

Responsibility: Interactive questions behind a swappable `Prompter`.

`TerminalPrompter` talks to the operator; `ScriptedPrompter` replays canned
answers so the whole pipeline can run unattended (tests, CI).
"""

from __future__ import annotations

import enum
import getpass
from typing import Iterable, Protocol, Sequence

from bootstrapper.errors import UserAbort, ValidationError
from bootstrapper.logging_config import get_logger, log_success
from bootstrapper.validation import is_kebab_case

logger = get_logger(__name__)


class Resolution(enum.Enum):
    DELETE_AND_RECREATE = "delete"
    RENAME = "rename"
    CONTINUE = "continue"
    ABORT = "abort"


class Prompter(Protocol):
    def ask(self, question: str) -> str: ...

    def ask_secret(self, question: str) -> str: ...

    def say(self, text: str = "") -> None: ...


class TerminalPrompter:
    def ask(self, question: str) -> str:
        return input(question)

    def ask_secret(self, question: str) -> str:
        return getpass.getpass(question)

    def say(self, text: str = "") -> None:
        print(text)


class ScriptedPrompter:
    """Answers questions from a fixed list, in order."""

    def __init__(self, answers: Iterable[str] = (), secrets: Iterable[str] = ()) -> None:
        self._answers = list(answers)
        self._secrets = list(secrets)
        self.questions: list[str] = []
        self.output: list[str] = []

    def ask(self, question: str) -> str:
        self.questions.append(question)
        if not self._answers:
            raise EOFError(f"No scripted answer left for: {question!r}")
        return self._answers.pop(0)

    def ask_secret(self, question: str) -> str:
        self.questions.append(question)
        if not self._secrets:
            raise EOFError(f"No scripted secret left for: {question!r}")
        return self._secrets.pop(0)

    def say(self, text: str = "") -> None:
        self.output.append(text)


def choose(prompter: Prompter, menu: Sequence[tuple[str, Resolution]]) -> Resolution:
    """
    Show a numbered menu and map the reply to a Resolution.

    An unrecognised reply aborts the run; there is no re-prompt.
    """
    prompter.say()
    prompter.say("What would you like to do?")
    for i, (label, _res) in enumerate(menu, start=1):
        prompter.say(f"{i}) {label}")
    prompter.say()
    reply = prompter.ask(f"Enter your choice (1-{len(menu)}): ").strip()

    if reply.isdigit() and 1 <= int(reply) <= len(menu):
        resolution = menu[int(reply) - 1][1]
        if resolution is Resolution.ABORT:
            logger.info("Exiting...")
            raise UserAbort("Exited at operator request")
        return resolution
    raise ValidationError("Invalid choice. Exiting...")


def prompt_for_new_name(prompter: Prompter) -> str:
    """Single attempt at a new kebab-case project name."""
    logger.info("Let's choose a new project name...")
    prompter.say()
    prompter.say("Project name requirements:")
    prompter.say("- Use kebab-case (lowercase letters, numbers, and hyphens only)")
    prompter.say("- Examples: my-awesome-project, user-management-api, payment-processor")
    prompter.say()
    name = prompter.ask("Enter new project name: ").strip()
    if not is_kebab_case(name):
        raise ValidationError("Invalid project name format. Must be kebab-case (e.g., my-awesome-project)")
    log_success(logger, "Project name updated", name=name)
    return name

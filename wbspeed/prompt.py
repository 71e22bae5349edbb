"""Interactive operator prompts."""

from __future__ import annotations

from typing import Callable, Optional

YES = ("y", "yes")


class ConsolePrompt:
    """Reads answers from stdin. Empty input and EOF count as "no"."""

    def __init__(self, input_func: Optional[Callable[[str], str]] = None) -> None:
        self._input = input_func or input

    def ask(self, question: str) -> str:
        try:
            return self._input(question).strip()
        except EOFError:
            return ""

    def confirm(self, question: str) -> bool:
        return self.ask(f"{question} [y/N] ").lower() in YES

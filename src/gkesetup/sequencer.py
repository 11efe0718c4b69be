# sequencer.py
from __future__ import annotations

from typing import Any, Callable, Dict, NoReturn, Optional, Sequence

import click

from .errors import UserAbort
from .model import ABORTED, EXECUTED, PENDING, ProvisioningStep
from .ui.console import Console, get_console

AFFIRMATIVE = ("y", "yes")


def _prompt(text: str) -> str:
    return click.prompt(text, default="", show_default=False, prompt_suffix="")


def is_affirmative(response: str) -> bool:
    """'y', 'yes' (any case) and blank input all count as yes."""
    answer = response.casefold()
    if not answer.strip():
        return True
    return answer.strip() in AFFIRMATIVE


class StepSequencer:
    """
    Walks a fixed list of steps in order, printing `n/N. description` for each.

    The step count N is fixed when the sequencer is built. Gated steps ask the
    operator first; a decline raises UserAbort and nothing after it runs.
    Steps that already ran are left as they are.
    """

    def __init__(
        self,
        total: int,
        *,
        console: Optional[Console] = None,
        reader: Optional[Callable[[str], str]] = None,
    ):
        self.total = total
        self.counter = 0
        self.console = console or get_console()
        self.reader = reader or _prompt
        self.states: Dict[int, str] = {}

    def advance(self, description: str = "") -> int:
        if self.counter >= self.total:
            raise ValueError(f"advance() called more than {self.total} times")
        self.counter += 1
        self.console.print_step(self.counter, self.total, description)
        return self.counter

    def ask(self, prompt: str) -> str:
        return self.reader(prompt)

    def confirm(self, prompt: str) -> bool:
        return is_affirmative(self.ask(prompt))

    def abort(self, reason: str = "Aborting") -> NoReturn:
        raise UserAbort(reason)

    def require_confirmation(self, prompt: str) -> None:
        """confirm() or abort()."""
        if not self.confirm(prompt):
            self.abort()
        self.console.print_info("Continuing")

    def run(self, steps: Sequence[ProvisioningStep], ctx: Any) -> Dict[int, str]:
        """
        Execute `steps` in order against `ctx` (anything with an `env` mapping).

        Returns:
            step ordinal -> "executed" | "aborted" | "pending"

        Raises whatever stopped the run; self.states still records how far it got.
        """
        if len(steps) != self.total:
            raise ValueError(f"Sequencer was built for {self.total} steps, got {len(steps)}")

        self.states = {n: PENDING for n in range(self.counter + 1, self.total + 1)}
        for step in steps:
            number = self.advance(step.description.format_map(ctx.env))
            try:
                if step.requires_confirmation:
                    self.require_confirmation((step.prompt or "Continue (y/N)? ").format_map(ctx.env))
                step.action(ctx)
            except BaseException:
                self.states[number] = ABORTED
                raise
            self.states[number] = EXECUTED

        return self.states

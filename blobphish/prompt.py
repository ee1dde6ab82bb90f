"""Continue / Skip / Exit confirmation shown before each workflow step."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from rich.style import Style
from rich.text import Text

from blobphish import keys
from blobphish.model import QUIT, Action, Decision, Effect
from blobphish.styles import Styles

OPTIONS = (
    (Action.CONTINUE, "Continue to next step"),
    (Action.SKIP, "Skip next step"),
    (Action.EXIT, "Exit process"),
)

HINT = " • ".join(f"{b.help_key}: {b.help_text}" for b in keys.PROMPT_KEYS)


@dataclass(frozen=True)
class StepPrompt:
    description: str
    step_number: int
    total_steps: int
    styles: Styles
    selected: int = 0
    quitting: bool = False

    def transition(self, key: str) -> Tuple["StepPrompt", Optional[Effect]]:
        if self.quitting:
            return self, None

        if keys.UP.matches(key):
            return replace(self, selected=(self.selected - 1) % len(OPTIONS)), None
        if keys.DOWN.matches(key):
            return replace(self, selected=(self.selected + 1) % len(OPTIONS)), None
        if keys.CONFIRM.matches(key):
            return self, Decision(Action(self.selected))
        if keys.QUIT.matches(key):
            return replace(self, quitting=True), QUIT
        return self, None

    def _option_style(self, action: Action):
        if action is Action.CONTINUE:
            return self.styles.option_continue
        if action is Action.SKIP:
            return self.styles.option_skip
        return self.styles.option_danger

    def render(self) -> Text:
        s = self.styles
        if self.quitting:
            return Text.assemble((" Process terminated by user ", s.status_bar), "\n")

        out = Text()
        out.append(f" Step {self.step_number} of {self.total_steps} ", style=s.status_bar)
        out.append("\n\n")
        out.append(self.description, style=s.command_bar)
        out.append("\n\n")
        for action, label in OPTIONS:
            highlighted = action == self.selected
            if highlighted:
                out.append(">", style=s.title)
            else:
                out.append(" ")
            out.append(" ")
            style = self._option_style(action)
            if highlighted:
                style = style + Style(bold=True)
            out.append(label, style=style)
            out.append("\n")
        out.append("\n")
        out.append(HINT, style=s.help)
        return out

"""Top-level interactive shell shown before, between and after workflow runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from rich.text import Text

from blobphish import keys
from blobphish.config import Configuration
from blobphish.model import LAUNCH, QUIT, Effect
from blobphish.styles import Styles
from blobphish.workflow import plan_steps

BANNER = r"""
:::::::::  :::        ::::::::  :::::::::  :::::::::  :::    ::: ::::::::::: ::::::::  :::    :::
:+:    :+: :+:       :+:    :+: :+:    :+: :+:    :+: :+:    :+:     :+:    :+:    :+: :+:    :+:
+:+    +:+ +:+       +:+    +:+ +:+    +:+ +:+    +:+ +:+    +:+     +:+    +:+        +:+    +:+
+#++:++#+  +#+       +#+    +:+ +#++:++#+  +#++:++#+  +#++:++#++     +#+    +#++:++#++ +#++:++#++
+#+    +#+ +#+       +#+    +#+ +#+    +#+ +#+        +#+    +#+     +#+           +#+ +#+    +#+
#+#    #+# #+#       #+#    #+# #+#    #+# #+#        #+#    #+#     #+#    #+#    #+# #+#    #+#
#########  ########## ########  #########  ###        ###    ### ########### ########  ###    ###
"""


@dataclass(frozen=True)
class MainModel:
    config: Configuration
    styles: Styles
    help_expanded: bool = False
    quitting: bool = False

    def __post_init__(self):
        if self.config is None:
            raise ValueError("MainModel requires a Configuration")

    @property
    def can_launch(self) -> bool:
        return bool(plan_steps(self.config))

    def transition(self, key: str) -> Tuple["MainModel", Optional[Effect]]:
        if self.quitting:
            return self, None
        if keys.HELP.matches(key):
            return replace(self, help_expanded=not self.help_expanded), None
        if keys.QUIT.matches(key):
            return replace(self, quitting=True), QUIT
        if keys.LAUNCH.matches(key) and self.can_launch:
            return self, LAUNCH
        return self, None

    def _targets(self) -> Text:
        cfg = self.config
        out = Text()
        for label, values in (
            ("Emails", cfg.email_list()),
            ("IPs", cfg.ip_list()),
            ("URLs", cfg.url_list()),
            ("Webpages", cfg.webpage_list()),
        ):
            if values:
                out.append(f"{label}: {', '.join(values)}\n", style=self.styles.help)
        return out

    def _help_panel(self) -> Text:
        bindings = keys.MAIN_KEYS if self.can_launch else (keys.HELP, keys.QUIT)
        width = max(len(b.help_key) for b in bindings)
        lines = [f"{b.help_key:<{width}}  {b.help_text}" for b in bindings]
        return Text("\n".join(lines), style=self.styles.help)

    def render(self) -> Text:
        s = self.styles
        if self.quitting:
            return Text.assemble((" Goodbye! ", s.status_bar), "\n")

        out = Text()
        out.append(BANNER, style=s.ascii)
        out.append("\n\n")
        if self.config.command:
            out.append(f"Command: {self.config.command}", style=s.command_bar)
            out.append("\n")
        out.append_text(self._targets())
        if self.can_launch:
            out.append("\nenter: run workflow • ?: help • q: quit", style=s.help)
        if self.help_expanded:
            out.append("\n\n")
            out.append_text(self._help_panel())
        return out

"""Entry point: configuration, logging, signals, then the interactive session."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.text import Text

from blobphish.config import Configuration, load_config, load_environment
from blobphish.logging_bootstrap import setup_logging
from blobphish.model import LAUNCH, QUIT
from blobphish.runner import CancelToken, SessionRunner, TerminalError, cancel_on_signals
from blobphish.session import MainModel
from blobphish.styles import Styles, load_styles
from blobphish.workflow import StepExecutor, log_executor, plan_steps, render_summary, run_workflow

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def run_session(
    config: Configuration,
    runner: SessionRunner,
    styles: Styles,
    execute: StepExecutor = log_executor,
) -> None:
    """Drive the main model, running the workflow each time it is launched."""
    model = MainModel(config, styles)
    while True:
        outcome = runner.run(model)
        model = outcome.model
        if outcome.cancelled or outcome.effect is QUIT:
            return
        if outcome.effect is not LAUNCH:
            continue

        report = run_workflow(plan_steps(config), runner, config, styles, execute)
        if report.ends_session:
            return
        runner.console.print(render_summary(report, styles))


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    keys=None,
    execute: StepExecutor = log_executor,
) -> int:
    console = console or Console()
    if argv is None:
        argv = sys.argv[1:]

    styles = load_styles()
    config = load_config(argv, console=console, styles=styles)
    setup_logging(config.verbose)
    if load_environment(config):
        # LOG_LEVEL / BLOBPHISH_LOG_FILE may come from the env file
        setup_logging(config.verbose)
    log.debug("configuration: %s", config)

    with cancel_on_signals(CancelToken()) as token:
        runner = SessionRunner(console, token, keys=keys)
        try:
            run_session(config, runner, styles, execute)
        except TerminalError as exc:
            log.debug("terminal failure", exc_info=True)
            console.print(Text(f"error running program: {exc}", style=styles.error))
            return EXIT_FAILURE
    return EXIT_OK

"""Invocation parameters -> immutable Configuration."""

from __future__ import annotations

import datetime
import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.text import Text

from blobphish.styles import Styles, load_styles

log = logging.getLogger(__name__)

PROG_NAME = "blobphish"
DEFAULT_ENV_PATH = "./.env"
DEFAULT_TIMEOUT = 300
DEFAULT_MAX_DEPTH = 3

BOOL_FLAGS = ("verbose", "combine", "active_recon")
TRUE_VALUES = ("1", "t", "T", "true", "TRUE", "True")
FALSE_VALUES = ("0", "f", "F", "false", "FALSE", "False")


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def default_analysis_id(now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now()
    return now.strftime("%y%m%d_%H%M")


@dataclass(frozen=True)
class Configuration:
    analysis_id: str = ""
    env_path: str = DEFAULT_ENV_PATH
    verbose: bool = False
    input_file: str = ""
    output_file: str = ""
    emails: str = ""
    ips: str = ""
    urls: str = ""
    webpages: str = ""
    combine: bool = False
    active_recon: bool = False
    timeout: int = DEFAULT_TIMEOUT
    max_depth: int = DEFAULT_MAX_DEPTH
    command: str = ""

    def email_list(self) -> List[str]:
        return _split_csv(self.emails)

    def ip_list(self) -> List[str]:
        return _split_csv(self.ips)

    def url_list(self) -> List[str]:
        return _split_csv(self.urls)

    def webpage_list(self) -> List[str]:
        return _split_csv(self.webpages)

    def has_targets(self) -> bool:
        return any((self.email_list(), self.ip_list(), self.url_list(), self.webpage_list()))


app = typer.Typer(add_completion=False, help="BlobPhish threat analysis console")


@app.command()
def configure(
    command: str = typer.Argument("", metavar="[COMMAND]", help="Sub-command to run.", show_default=False),
    analysis_id: str = typer.Option("", "-id", "--id", help="Analysis ID (default: YYMMDD_HHMM)", show_default=False),
    env_path: str = typer.Option(DEFAULT_ENV_PATH, "-env", "--env", help="Path to .env file"),
    verbose: bool = typer.Option(False, "-verbose/-no-verbose", "--verbose/--no-verbose", help="Enable verbose output"),
    input_file: str = typer.Option("", "-input", "--input", help="Input file path", show_default=False),
    output_file: str = typer.Option("", "-output", "--output", help="Output file path", show_default=False),
    emails: str = typer.Option("", "-emails", "--emails", help="Comma-separated email addresses", show_default=False),
    ips: str = typer.Option("", "-ips", "--ips", help="Comma-separated IP addresses", show_default=False),
    urls: str = typer.Option("", "-urls", "--urls", help="Comma-separated URLs", show_default=False),
    webpages: str = typer.Option("", "-webpages", "--webpages", help="Comma-separated webpage URLs", show_default=False),
    combine: bool = typer.Option(False, "-combine/-no-combine", "--combine/--no-combine", help="Combine multiple threats"),
    active_recon: bool = typer.Option(
        False, "-active_recon/-no-active_recon", "--active_recon/--no-active_recon", help="Use active reconnaissance"
    ),
    timeout: int = typer.Option(DEFAULT_TIMEOUT, "-timeout", "--timeout", help="Scan timeout in seconds"),
    max_depth: int = typer.Option(DEFAULT_MAX_DEPTH, "-max-depth", "--max-depth", help="Maximum scan depth"),
) -> Configuration:
    """Parse the invocation into a Configuration."""
    return Configuration(
        analysis_id=analysis_id or default_analysis_id(),
        env_path=env_path,
        verbose=verbose,
        input_file=input_file,
        output_file=output_file,
        emails=emails,
        ips=ips,
        urls=urls,
        webpages=webpages,
        combine=combine,
        active_recon=active_recon,
        timeout=timeout,
        max_depth=max_depth,
        command=command,
    )


def expand_bool_flags(args: Sequence[str]) -> List[str]:
    """Rewrite ``-flag=true`` / ``-flag=false`` into the bare flag or its ``-no-`` form.

    Values outside TRUE_VALUES / FALSE_VALUES are left alone so the parser
    reports them.
    """
    out: List[str] = []
    for i, arg in enumerate(args):
        if arg == "--":
            out.extend(args[i:])
            break
        name, sep, value = arg.partition("=")
        dashes = name[: len(name) - len(name.lstrip("-"))]
        flag = name[len(dashes):]
        if sep and flag in BOOL_FLAGS and dashes in ("-", "--"):
            if value in TRUE_VALUES:
                arg = name
            elif value in FALSE_VALUES:
                arg = f"{dashes}no-{flag}"
        out.append(arg)
    return out


def _usage_error_class(command) -> type:
    """UsageError from the click package ``command`` is built on.

    Newer typer releases carry their own click copy, so the class is looked
    up from the command's base rather than from the ``click`` distribution.
    """
    for klass in type(command).__mro__:
        module = klass.__module__
        if klass.__name__ == "Command" and module.endswith(".core") and not module.startswith("typer.core"):
            package = module.rsplit(".", 1)[0]
            return importlib.import_module(f"{package}.exceptions").UsageError
    raise TypeError(f"{type(command).__name__} is not a click command")


def load_config(
    argv: Optional[Sequence[str]] = None,
    console: Optional[Console] = None,
    styles: Optional[Styles] = None,
) -> Configuration:
    """Build the Configuration from ``argv``.

    No arguments at all gives a defaults-only Configuration. Flag errors print
    the problem and the usage text to stdout and exit with status 1.
    """
    args = expand_bool_flags(list(argv or []))
    if not args:
        return Configuration(analysis_id=default_analysis_id())

    console = console or Console()
    command = typer.main.get_command(app)
    usage_error = _usage_error_class(command)
    try:
        result = command.main(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except usage_error as exc:
        styles = styles or load_styles()
        console.print(Text(f"Error: {exc.format_message()}", style=styles.error))
        ctx = exc.ctx or command.context_class(command, info_name=PROG_NAME)
        console.print(Text(ctx.get_usage()))
        console.print(Text(f"Try '{PROG_NAME} --help' for the list of flags.", style=styles.help))
        raise SystemExit(1) from exc

    if not isinstance(result, Configuration):
        # --help
        raise SystemExit(result or 0)
    return result


def load_environment(config: Configuration) -> bool:
    path = Path(config.env_path).expanduser()
    if not path.is_file():
        log.debug("env file not found: %s", path)
        return False
    loaded = load_dotenv(path, override=False)
    log.debug("loaded env file %s", path)
    return loaded

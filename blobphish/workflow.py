"""Multi-step analysis workflow bracketed by step-confirmation prompts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence

import tldextract
from rich.text import Text

from blobphish.config import Configuration
from blobphish.model import QUIT, Action, Decision
from blobphish.prompt import StepPrompt
from blobphish.styles import Styles

log = logging.getLogger(__name__)

# bundled public suffix snapshot only; never fetch or cache
_EXTRACT = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())

STATUS_FINISHED = "finished"
STATUS_EXITED = "exited"
STATUS_QUIT = "quit"
STATUS_CANCELLED = "cancelled"


@dataclass(frozen=True)
class Step:
    key: str
    description: str


class StepExecutor(Protocol):
    def __call__(self, step: Step, config: Configuration) -> None:
        ...


def log_executor(step: Step, config: Configuration) -> None:
    log.info("no analyser attached for step %s (analysis %s)", step.key, config.analysis_id)


def _plural(n: int, word: str, plural: str = "") -> str:
    return f"{n} {word}" if n == 1 else f"{n} {plural or word + 's'}"


def registrable_domains(targets: Sequence[str]) -> List[str]:
    seen: List[str] = []
    for target in targets:
        ext = _EXTRACT(target)
        if ext.domain and ext.suffix:
            dom = f"{ext.domain}.{ext.suffix}"
            if dom not in seen:
                seen.append(dom)
    return seen


def _web_description(verb: str, count: str, targets: List[str], config: Configuration, extra: str = "") -> str:
    desc = f"{verb} {count}"
    domains = registrable_domains(targets)
    if domains:
        desc += f" on {', '.join(domains)}"
    notes = [n for n in (extra, "active reconnaissance" if config.active_recon else "") if n]
    if notes:
        desc += f" ({', '.join(notes)})"
    return desc


def plan_steps(config: Configuration) -> List[Step]:
    steps: List[Step] = []
    if config.input_file:
        steps.append(Step("input", f"Load targets from {config.input_file}"))

    categories = []
    emails = config.email_list()
    if emails:
        categories.append("emails")
        steps.append(Step("emails", f"Analyse {_plural(len(emails), 'email address', 'email addresses')}: {', '.join(emails)}"))
    ips = config.ip_list()
    if ips:
        categories.append("IPs")
        steps.append(Step("ips", f"Analyse {_plural(len(ips), 'IP address', 'IP addresses')}: {', '.join(ips)}"))
    urls = config.url_list()
    if urls:
        categories.append("URLs")
        steps.append(Step("urls", _web_description("Analyse", _plural(len(urls), "URL"), urls, config)))
    webpages = config.webpage_list()
    if webpages:
        categories.append("webpages")
        steps.append(Step(
            "webpages",
            _web_description("Crawl", _plural(len(webpages), "webpage"), webpages, config,
                             extra=f"depth {config.max_depth}"),
        ))

    if config.combine and len(categories) > 1:
        steps.append(Step("combine", f"Correlate findings across {', '.join(categories)}"))
    return steps


@dataclass
class WorkflowReport:
    status: str = STATUS_FINISHED
    completed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    remaining: List[str] = field(default_factory=list)

    @property
    def ends_session(self) -> bool:
        return self.status in (STATUS_QUIT, STATUS_CANCELLED)


def run_workflow(
    steps: Sequence[Step],
    runner,
    config: Configuration,
    styles: Styles,
    execute: StepExecutor = log_executor,
) -> WorkflowReport:
    """Prompt before every step and act on the operator's decision.

    Continue runs the step, Skip records it, Exit stops the workflow. The
    quit key or a cancellation stops it as well and marks the report so the
    caller ends the whole session.
    """
    report = WorkflowReport()
    total = len(steps)
    for index, step in enumerate(steps, start=1):
        outcome = runner.run(StepPrompt(step.description, index, total, styles))
        if outcome.cancelled or outcome.effect is QUIT:
            report.status = STATUS_CANCELLED if outcome.cancelled else STATUS_QUIT
            report.remaining = [s.key for s in steps[index - 1:]]
            log.info("workflow %s at step %d/%d", report.status, index, total)
            return report

        if not isinstance(outcome.effect, Decision):
            raise RuntimeError(f"unexpected prompt outcome: {outcome.effect!r}")
        action = outcome.effect.action

        if action is Action.EXIT:
            report.status = STATUS_EXITED
            report.remaining = [s.key for s in steps[index - 1:]]
            log.info("workflow exited by operator at step %d/%d", index, total)
            return report
        if action is Action.SKIP:
            log.info("step %s skipped", step.key)
            report.skipped.append(step.key)
            continue

        log.info("running step %s", step.key)
        try:
            execute(step, config)
        except Exception:
            log.exception("step %s failed", step.key)
            report.failed.append(step.key)
            continue
        report.completed.append(step.key)

    return report


def render_summary(report: WorkflowReport, styles: Styles) -> Text:
    out = Text()
    out.append(f" Workflow {report.status} ", style=styles.status_bar)
    out.append("\n")
    rows = (
        ("completed", report.completed, styles.option_continue),
        ("skipped", report.skipped, styles.option_skip),
        ("failed", report.failed, styles.option_danger),
        ("not run", report.remaining, styles.help),
    )
    for label, keys, style in rows:
        if keys:
            out.append(f"{label}: ", style=styles.help)
            out.append(", ".join(keys), style=style)
            out.append("\n")
    return out

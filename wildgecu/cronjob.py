"""Cron job definitions stored as Markdown files with YAML front matter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

import yaml

_OPEN_DELIMITER = "---\n"
_CLOSE_DELIMITER = "\n---"


class CronError(Exception):
    """Raised when a cron job or cron expression is invalid."""


@dataclass
class CronJob:
    """A scheduled LLM prompt."""

    name: str
    schedule: str
    prompt: str = ""


def _frontmatter_value(meta: dict, key: str) -> str:
    value = meta.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CronError(f"parse frontmatter: {key!r} must be a scalar")
    return value


def parse(data: Union[bytes, str]) -> CronJob:
    """Parse a cron job from Markdown with a YAML front matter block.

    The expected layout is::

        ---
        name: daily-summary
        cron: "0 9 * * *"
        ---
        Your prompt here...
    """
    content = data.decode("utf-8") if isinstance(data, bytes) else data

    if not content.startswith(_OPEN_DELIMITER):
        raise CronError("missing frontmatter delimiter")

    rest = content[len(_OPEN_DELIMITER):]
    end = rest.find(_CLOSE_DELIMITER)
    if end < 0:
        raise CronError("missing closing frontmatter delimiter")

    frontmatter = rest[:end]
    body = rest[end + len(_CLOSE_DELIMITER):].strip()

    try:
        # BaseLoader keeps every scalar as a string, as the schema expects.
        meta = yaml.load(frontmatter, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise CronError(f"parse frontmatter: {exc}") from exc

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise CronError("parse frontmatter: expected a mapping")

    name = _frontmatter_value(meta, "name")
    schedule = _frontmatter_value(meta, "cron")
    if not name:
        raise CronError("name is required")
    if not schedule:
        raise CronError("cron schedule is required")

    return CronJob(name=name, schedule=schedule, prompt=body)


def serialize(job: CronJob) -> bytes:
    """Render a job back into front matter plus body."""
    frontmatter = yaml.safe_dump(
        {"name": job.name, "cron": job.schedule},
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
    parts = [_OPEN_DELIMITER, frontmatter, _OPEN_DELIMITER]
    if job.prompt:
        parts.append(job.prompt + "\n")
    return "".join(parts).encode("utf-8")


def filename(name: str) -> str:
    """Return the Markdown file name for a job name."""
    return f"{name}.md"


def load_all(directory: Union[str, Path]) -> Tuple[List[CronJob], List[CronError]]:
    """Load every ``*.md`` job in *directory*.

    Returns the jobs that parsed and one error for each file that did not.
    """
    root = Path(directory)
    if not root.is_dir():
        return [], []

    try:
        paths = sorted(p for p in root.glob("*.md") if p.is_file())
    except OSError as exc:
        return [], [CronError(f"search: {exc}")]

    jobs: List[CronJob] = []
    errors: List[CronError] = []
    for path in paths:
        try:
            data = path.read_bytes()
        except OSError as exc:
            errors.append(CronError(f"read {path.name}: {exc}"))
            continue
        try:
            jobs.append(parse(data))
        except (CronError, UnicodeDecodeError) as exc:
            errors.append(CronError(f"{path.name}: {exc}"))
    return jobs, errors


@dataclass
class ExecutorConfig:
    """What a job run needs.

    ``provider`` is called with the prompt text and returns the model's reply.
    """

    provider: Callable[[str], str]
    results_dir: Path
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))


def execute(config: ExecutorConfig, job: CronJob) -> Optional[Path]:
    """Run one job and store the reply in the results directory.

    Failures are logged, not raised. Returns the written path, or None.
    """
    log = config.logger
    log.info("executing cron job %s", job.name)

    try:
        reply = config.provider(job.prompt)
    except Exception as exc:  # any provider failure only ends this run
        log.error("cron job %s failed: %s", job.name, exc)
        return None

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    target = Path(config.results_dir) / f"{job.name}-{stamp}.md"

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes((reply or "").encode("utf-8"))
    except OSError as exc:
        log.error("failed to write cron result for %s: %s", job.name, exc)
        return None

    log.info("cron job %s completed, wrote %s", job.name, target.name)
    return target
"""Cron expression parsing and a background scheduler for cron jobs."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import FrozenSet, List, Optional, Union

from wildgecu.cronjob import CronError, CronJob, ExecutorConfig, execute, load_all

_SEARCH_YEARS = 5

_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

_MONTH_NAMES = {
    name: number
    for number, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}
_DAY_NAMES = {
    name: number
    for number, name in enumerate(["sun", "mon", "tue", "wed", "thu", "fri", "sat"])
}


def _field_value(text: str, names: dict) -> int:
    lowered = text.lower()
    if lowered in names:
        return names[lowered]
    try:
        return int(text)
    except ValueError:
        raise CronError(f"invalid value {text!r}") from None


def _parse_field(text: str, low: int, high: int, names: dict) -> FrozenSet[int]:
    values = set()
    for part in text.split(","):
        if not part:
            raise CronError(f"empty element in field {text!r}")
        range_text, slash, step_text = part.partition("/")
        step = 1
        if slash:
            try:
                step = int(step_text)
            except ValueError:
                raise CronError(f"invalid step {step_text!r}") from None
            if step <= 0:
                raise CronError(f"step must be positive in {part!r}")

        if range_text in ("*", "?"):
            start, end = low, high
        else:
            first, dash, last = range_text.partition("-")
            start = _field_value(first, names)
            if dash:
                end = _field_value(last, names)
            else:
                end = high if slash else start

        if not low <= start <= high or not low <= end <= high:
            raise CronError(f"value out of range [{low}, {high}] in {part!r}")
        if start > end:
            raise CronError(f"range start beyond end in {part!r}")
        values.update(range(start, end + 1, step))
    return frozenset(values)


def _is_wildcard(text: str) -> bool:
    return text.startswith("*") or text.startswith("?")


@dataclass(frozen=True)
class CronExpression:
    """A five-field cron expression: minute, hour, day of month, month, weekday."""

    text: str
    minutes: FrozenSet[int]
    hours: FrozenSet[int]
    days: FrozenSet[int]
    months: FrozenSet[int]
    weekdays: FrozenSet[int]
    any_day: bool
    any_weekday: bool

    @classmethod
    def parse(cls, text: str) -> "CronExpression":
        """Parse a standard cron expression or an ``@daily``-style descriptor."""
        stripped = text.strip()
        expanded = _DESCRIPTORS.get(stripped.lower(), stripped)
        fields = expanded.split()
        if len(fields) != 5:
            raise CronError(f"expected 5 fields, found {len(fields)}: {text!r}")
        minute, hour, day, month, weekday = fields
        return cls(
            text=stripped,
            minutes=_parse_field(minute, 0, 59, {}),
            hours=_parse_field(hour, 0, 23, {}),
            days=_parse_field(day, 1, 31, {}),
            months=_parse_field(month, 1, 12, _MONTH_NAMES),
            weekdays=_parse_field(weekday, 0, 6, _DAY_NAMES),
            any_day=_is_wildcard(day),
            any_weekday=_is_wildcard(weekday),
        )

    def _day_matches(self, moment: datetime) -> bool:
        day_ok = moment.day in self.days
        weekday_ok = (moment.weekday() + 1) % 7 in self.weekdays
        if self.any_day or self.any_weekday:
            return day_ok and weekday_ok
        return day_ok or weekday_ok

    def next_after(self, moment: datetime) -> datetime:
        """Return the first matching minute strictly after *moment*."""
        current = moment.replace(second=0, microsecond=0) + timedelta(minutes=1)
        limit = current.year + _SEARCH_YEARS
        while current.year <= limit:
            if current.month not in self.months:
                if current.month == 12:
                    year, month = current.year + 1, 1
                else:
                    year, month = current.year, current.month + 1
                current = current.replace(year=year, month=month, day=1, hour=0, minute=0)
                continue
            if not self._day_matches(current):
                current = current.replace(hour=0, minute=0) + timedelta(days=1)
                continue
            if current.hour not in self.hours:
                current = current.replace(minute=0) + timedelta(hours=1)
                continue
            if current.minute not in self.minutes:
                current += timedelta(minutes=1)
                continue
            return current
        raise CronError(f"no time matches {self.text!r}")


@dataclass
class JobInfo:
    """Runtime information about a scheduled job."""

    name: str
    schedule: str
    next_run: str
    last_run: str = ""


@dataclass
class _ScheduledJob:
    job: CronJob
    expression: CronExpression
    next_run: datetime
    last_run: Optional[datetime] = None


def _format_time(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Scheduler:
    """Runs cron jobs from a directory of job files, in UTC."""

    def __init__(self, crons_dir: Union[str, Path], executor_config: ExecutorConfig) -> None:
        self._crons_dir = Path(crons_dir)
        self._config = executor_config
        self._logger = executor_config.logger
        self._cond = threading.Condition()
        self._jobs: List[_ScheduledJob] = []
        self._thread: Optional[threading.Thread] = None
        self._stopping = False

    def _load_jobs(self, context: str) -> int:
        jobs, errors = load_all(self._crons_dir)
        for error in errors:
            self._logger.warning("cron %s error: %s", context, error)

        now = _now()
        self._jobs = []
        for job in jobs:
            try:
                expression = CronExpression.parse(job.schedule)
                next_run = expression.next_after(now)
            except CronError as exc:
                self._logger.error("failed to add cron job %s: %s", job.name, exc)
                continue
            self._jobs.append(_ScheduledJob(job, expression, next_run))
        return len(jobs)

    def load_and_start(self) -> None:
        """Load every job from the directory and start the scheduler thread."""
        with self._cond:
            loaded = self._load_jobs("load")
            if self._thread is None:
                self._stopping = False
                self._thread = threading.Thread(
                    target=self._run, name="cron-scheduler", daemon=True
                )
                self._thread.start()
            self._cond.notify_all()
        self._logger.info("cron scheduler started with %d jobs", loaded)

    def reload(self) -> None:
        """Drop all jobs and load them again from the directory."""
        with self._cond:
            loaded = self._load_jobs("reload")
            self._cond.notify_all()
        self._logger.info("cron scheduler reloaded with %d jobs", loaded)

    def list_jobs(self) -> List[JobInfo]:
        """Return runtime information for every scheduled job."""
        with self._cond:
            return [
                JobInfo(
                    name=entry.job.name,
                    schedule=entry.job.schedule,
                    next_run=_format_time(entry.next_run),
                    last_run=_format_time(entry.last_run) if entry.last_run else "",
                )
                for entry in self._jobs
            ]

    def job_count(self) -> int:
        """Return the number of registered jobs."""
        with self._cond:
            return len(self._jobs)

    def stop(self) -> None:
        """Stop the scheduler thread and wait for it to finish."""
        with self._cond:
            self._stopping = True
            thread, self._thread = self._thread, None
            self._cond.notify_all()
        if thread is not None:
            thread.join()

    def _run(self) -> None:
        with self._cond:
            while not self._stopping:
                now = _now()
                for entry in self._jobs:
                    if entry.next_run <= now:
                        entry.last_run = now
                        entry.next_run = entry.expression.next_after(now)
                        threading.Thread(
                            target=execute,
                            args=(self._config, entry.job),
                            name=f"cron-{entry.job.name}",
                            daemon=True,
                        ).start()
                timeout = None
                if self._jobs:
                    soonest = min(entry.next_run for entry in self._jobs)
                    timeout = max((soonest - _now()).total_seconds(), 0.0)
                self._cond.wait(timeout)
import logging
from datetime import datetime, timezone

import pytest

from wildgecu.cronjob import CronError, ExecutorConfig
from wildgecu.schedule import CronExpression, Scheduler


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def crons(tmp_path):
    directory = tmp_path / "crons"
    directory.mkdir()
    return directory


@pytest.fixture
def scheduler(tmp_path, crons):
    config = ExecutorConfig(
        provider=lambda prompt: "test",
        results_dir=tmp_path / "results",
        logger=logging.getLogger("test-scheduler"),
    )
    sched = Scheduler(crons, config)
    yield sched
    sched.stop()


def _write_job(directory, name, schedule, prompt):
    (directory / f"{name}.md").write_text(f'---\nname: {name}\ncron: "{schedule}"\n---\n{prompt}')


def test_scheduler_load_and_start(scheduler, crons):
    _write_job(crons, "job1", "0 9 * * *", "prompt1")
    _write_job(crons, "job2", "0 18 * * *", "prompt2")
    scheduler.load_and_start()
    assert scheduler.job_count() == 2


def test_scheduler_reload(scheduler, crons):
    _write_job(crons, "job1", "0 9 * * *", "prompt1")
    scheduler.load_and_start()
    assert scheduler.job_count() == 1

    _write_job(crons, "job2", "0 18 * * *", "prompt2")
    scheduler.reload()
    assert scheduler.job_count() == 2


def test_scheduler_reload_removes_deleted_jobs(scheduler, crons):
    _write_job(crons, "job1", "0 9 * * *", "prompt1")
    _write_job(crons, "job2", "0 18 * * *", "prompt2")
    scheduler.load_and_start()
    assert scheduler.job_count() == 2

    (crons / "job2.md").unlink()
    scheduler.reload()
    assert scheduler.job_count() == 1


def test_scheduler_empty_load(scheduler):
    scheduler.load_and_start()
    assert scheduler.job_count() == 0


def test_scheduler_skips_invalid_schedule(scheduler, crons):
    _write_job(crons, "good", "0 9 * * *", "p")
    _write_job(crons, "broken", "not a cron", "p")
    scheduler.load_and_start()
    assert [info.name for info in scheduler.list_jobs()] == ["good"]


def test_scheduler_list_jobs(scheduler, crons):
    _write_job(crons, "job1", "0 9 * * *", "prompt1")
    _write_job(crons, "job2", "30 18 * * *", "prompt2")
    scheduler.load_and_start()

    infos = scheduler.list_jobs()
    assert [(i.name, i.schedule) for i in infos] == [("job1", "0 9 * * *"), ("job2", "30 18 * * *")]
    assert infos[0].next_run.endswith("T09:00:00Z")
    assert infos[1].next_run.endswith("T18:30:00Z")
    assert all(i.last_run == "" for i in infos)
    next_run = datetime.strptime(infos[0].next_run, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
    assert next_run > datetime.now(timezone.utc)


def test_expression_daily():
    expr = CronExpression.parse("0 9 * * *")
    assert expr.next_after(_utc(2024, 1, 1, 8, 30)) == _utc(2024, 1, 1, 9, 0)
    assert expr.next_after(_utc(2024, 1, 1, 9, 0)) == _utc(2024, 1, 2, 9, 0)


def test_expression_step():
    expr = CronExpression.parse("*/15 * * * *")
    assert expr.next_after(_utc(2024, 1, 1, 10, 7, 42)) == _utc(2024, 1, 1, 10, 15)
    assert expr.next_after(_utc(2024, 1, 1, 10, 50)) == _utc(2024, 1, 1, 11, 0)


def test_expression_year_rollover():
    expr = CronExpression.parse("0 0 1 1 *")
    assert expr.next_after(_utc(2024, 6, 15, 12, 0)) == _utc(2025, 1, 1, 0, 0)


def test_expression_weekday():
    # 2024-01-01 is a Monday.
    expr = CronExpression.parse("0 0 * * 1")
    assert expr.next_after(_utc(2024, 1, 1, 0, 0)) == _utc(2024, 1, 8, 0, 0)


def test_expression_day_or_weekday():
    expr = CronExpression.parse("0 0 13 * 5")
    assert expr.next_after(_utc(2024, 1, 1, 0, 0)) == _utc(2024, 1, 5, 0, 0)


def test_expression_names_and_lists():
    expr = CronExpression.parse("0 12 * FEB,mar SUN")
    assert expr.next_after(_utc(2024, 1, 1)) == _utc(2024, 2, 4, 12, 0)


def test_expression_range():
    expr = CronExpression.parse("0 9-17/4 * * *")
    assert expr.hours == frozenset({9, 13, 17})


def test_expression_descriptor():
    expr = CronExpression.parse("@hourly")
    assert expr.next_after(_utc(2024, 1, 1, 10, 30)) == _utc(2024, 1, 1, 11, 0)


def test_expression_impossible_date():
    expr = CronExpression.parse("0 0 30 2 *")
    with pytest.raises(CronError):
        expr.next_after(_utc(2024, 1, 1))


@pytest.mark.parametrize(
    "text",
    ["0 9 * *", "60 * * * *", "* 24 * * *", "*/0 * * * *", "abc * * * *", "0 0 0 * *", "5-1 * * * *"],
)
def test_expression_invalid(text):
    with pytest.raises(CronError):
        CronExpression.parse(text)
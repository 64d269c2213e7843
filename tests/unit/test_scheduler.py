import pytest

from autoledger.config import settings
from autoledger.scheduler.scheduler import build_scheduler, parse_run_time


def test_parse_run_time():
    assert parse_run_time("00:15") == (0, 15)
    assert parse_run_time(" 23:50 ") == (23, 50)


@pytest.mark.parametrize("value", ["24:00", "7", "ab:cd", "12:60", ""])
def test_parse_run_time_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_run_time(value)


def test_build_scheduler_registers_jobs(monkeypatch):
    monkeypatch.setattr(settings, "AUTOMATION_RUN_TIME", "01:30")
    monkeypatch.setattr(settings, "SNAPSHOT_RUN_TIME", "23:45")

    scheduler = build_scheduler()
    jobs = {job.id: job for job in scheduler.get_jobs()}

    assert set(jobs) == {"run_automations_job", "capture_snapshots_job"}
    assert "hour='1'" in str(jobs["run_automations_job"].trigger)
    assert "minute='30'" in str(jobs["run_automations_job"].trigger)
    assert "hour='23'" in str(jobs["capture_snapshots_job"].trigger)

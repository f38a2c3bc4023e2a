from apscheduler.triggers.cron import CronTrigger

from scripts.groupsync import scheduler
from scripts.groupsync.config import SchedulerConfig
from scripts.groupsync.synchronizer import ScheduledInvocation

from conftest import make_config


def test_build_scheduler_registers_cron_job():
    config = make_config(scheduler=SchedulerConfig(cron="*/15 * * * *", misfire_grace_time=60))
    sched = scheduler.build_scheduler(config)

    jobs = sched.get_jobs()
    assert [j.id for j in jobs] == [scheduler.JOB_ID]
    job = jobs[0]
    assert isinstance(job.trigger, CronTrigger)
    assert str(job.trigger.fields[CronTrigger.FIELD_NAMES.index("minute")]) == "*/15"
    assert job.max_instances == 1
    assert job.misfire_grace_time == 60
    assert job.args == (config,)


def test_scheduled_job_runs_scheduled_invocation(monkeypatch):
    seen = []
    monkeypatch.setattr(scheduler, "handle_invocation", lambda mode, config: seen.append(mode))

    scheduler._run_scheduled_sync(make_config())

    assert seen == [ScheduledInvocation()]

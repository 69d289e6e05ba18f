"""Tests for the job control service."""

import asyncio
from pathlib import Path

import pytest

from website_finder.core.exceptions import (
    AlreadyProcessingError,
    JobNotFoundError,
    OutputNotReadyError,
)
from website_finder.models.job import JobStatus

from conftest import FakeSession


class GatedSession(FakeSession):
    """Session whose navigation blocks until the test opens the gate."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.gate = asyncio.Event()
        self.waiting = asyncio.Event()

    async def navigate(self, url, wait_until="domcontentloaded", timeout_ms=20000):
        self.waiting.set()
        await self.gate.wait()
        await super().navigate(url, wait_until=wait_until, timeout_ms=timeout_ms)


@pytest.mark.asyncio
async def test_job_lifecycle(build_control, make_workbook):
    source = make_workbook(["Company"], [["Acme Corp"], ["Globex"]])
    control = build_control(FakeSession(links_by_query={"Acme Corp": ["https://acme.com"]}))

    job_id = control.create_job(source)
    assert control.get_status(job_id).status == JobStatus.UPLOADED

    await control.start_processing(job_id)
    snapshot = await control.wait(job_id)

    assert snapshot.status == JobStatus.COMPLETED
    assert snapshot.processed == snapshot.total == 2
    assert snapshot.success_count == 1
    assert snapshot.success_ratio == 50.0
    assert snapshot.output_available is True
    assert [r.website for r in snapshot.recent_results] == ["https://acme.com", ""]
    assert control.get_output_path(job_id).exists()


@pytest.mark.asyncio
async def test_recent_results_are_capped(build_control, make_workbook):
    companies = [[f"Company {i}"] for i in range(1, 13)]
    control = build_control(FakeSession())
    job_id = control.create_job(make_workbook(["Company"], companies))

    await control.start_processing(job_id)
    snapshot = await control.wait(job_id)

    assert snapshot.processed == 12
    assert [r.company for r in snapshot.recent_results] == [f"Company {i}" for i in range(3, 13)]


@pytest.mark.asyncio
async def test_start_while_processing_is_rejected(build_control, make_workbook):
    session = GatedSession()
    control = build_control(session)
    job_id = control.create_job(make_workbook(["Company"], [["Acme"]]))

    await control.start_processing(job_id)
    await session.waiting.wait()

    with pytest.raises(AlreadyProcessingError):
        await control.start_processing(job_id)
    with pytest.raises(OutputNotReadyError):
        control.get_output_path(job_id)

    session.gate.set()
    snapshot = await control.wait(job_id)
    assert snapshot.status == JobStatus.COMPLETED
    assert snapshot.epoch == 1


@pytest.mark.asyncio
async def test_stop_running_job(build_control, make_workbook):
    session = GatedSession()
    control = build_control(session)
    job_id = control.create_job(make_workbook(["Company"], [["Alpha"], ["Beta"], ["Gamma"]]))

    await control.start_processing(job_id)
    await session.waiting.wait()
    control.request_stop(job_id)
    session.gate.set()
    snapshot = await control.wait(job_id)

    assert snapshot.status == JobStatus.STOPPED
    assert snapshot.processed == 1
    assert snapshot.output_available is True
    assert control.get_output_path(job_id).exists()


@pytest.mark.asyncio
async def test_restart_opens_new_epoch(build_control, make_workbook):
    control = build_control(FakeSession(links_by_query={"Acme": ["https://acme.com"]}))
    job_id = control.create_job(make_workbook(["Company"], [["Acme"]]))

    await control.start_processing(job_id)
    await control.wait(job_id)
    first_output = control.get_output_path(job_id)

    await control.start_processing(job_id)
    snapshot = await control.wait(job_id)

    assert snapshot.epoch == 2
    assert snapshot.processed == 1
    assert len(snapshot.recent_results) == 1
    assert control.get_output_path(job_id) != first_output


@pytest.mark.asyncio
async def test_error_job_has_no_output(build_control, make_workbook):
    control = build_control(FakeSession())
    job_id = control.create_job(make_workbook(["Name"], [["Acme"]]))

    await control.start_processing(job_id)
    snapshot = await control.wait(job_id)

    assert snapshot.status == JobStatus.ERROR
    assert snapshot.error == "no company column"
    with pytest.raises(OutputNotReadyError):
        control.get_output_path(job_id)


@pytest.mark.asyncio
async def test_unknown_job(build_control):
    control = build_control(FakeSession())

    with pytest.raises(JobNotFoundError):
        control.get_status("missing")
    with pytest.raises(JobNotFoundError):
        control.request_stop("missing")
    with pytest.raises(JobNotFoundError):
        await control.start_processing("missing")


@pytest.mark.asyncio
async def test_shutdown_stops_running_jobs(build_control, make_workbook):
    session = GatedSession()
    control = build_control(session)
    job_id = control.create_job(make_workbook(["Company"], [["Alpha"], ["Beta"]]))

    await control.start_processing(job_id)
    await session.waiting.wait()
    shutdown = asyncio.create_task(control.shutdown())
    await asyncio.sleep(0)
    session.gate.set()
    await shutdown

    assert control.get_status(job_id).status == JobStatus.STOPPED
    assert Path(control.get_output_path(job_id)).exists()


def test_list_jobs(build_control, make_workbook):
    control = build_control(FakeSession())
    first = control.create_job(make_workbook(["Company"], [["A"]], name="a.xlsx"))
    second = control.create_job(make_workbook(["Company"], [["B"]], name="b.xlsx"))

    assert [s.job_id for s in control.list_jobs()] == [first, second]
    assert control.list_jobs()[0].file_name == "a.xlsx"


@pytest.mark.asyncio
async def test_finished_tasks_are_released(build_control, make_workbook):
    session = GatedSession()
    control = build_control(session)
    job_id = control.create_job(make_workbook(["Company"], [["Acme"]]))

    await control.start_processing(job_id)
    await session.waiting.wait()
    assert job_id in control._tasks

    session.gate.set()
    await control.wait(job_id)
    await asyncio.sleep(0)

    assert control._tasks == {}
    assert (await control.wait(job_id)).status == JobStatus.COMPLETED

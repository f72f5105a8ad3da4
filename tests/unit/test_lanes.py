"""
Unit tests for the dual queue.
"""

import pytest
from prometheus_client import REGISTRY

from lsp_queue.constants import PRIORITY_REQUESTS, Lane, Request
from lsp_queue.scheduler.lanes import DualQueue, classify, is_priority_job
from lsp_queue.scheduler.registry import JobRegistry
from lsp_queue.types.job import EnqueuedJob, Job


class TestClassify:
    """Tests for lane classification."""

    @pytest.mark.parametrize(
        "request_kind",
        [
            Request.API_ADD_URI,
            Request.API_REM_URI,
            Request.API_ADD_PKG,
            Request.API_REM_PKG,
            Request.API_ADD_JAR,
            Request.API_REM_JAR,
        ],
    )
    def test_mutations_are_priority(self, request_kind: Request):
        job = Job(request=request_kind, uri="file:///a.flix")

        assert is_priority_job(job) is True
        assert classify(job) is Lane.PRIORITY

    @pytest.mark.parametrize(
        "request_kind",
        [Request.LSP_CHECK, Request.LSP_HOVER, Request.API_SHUTDOWN, Request.CMD_RUN_TESTS],
    )
    def test_everything_else_is_normal(self, request_kind: Request):
        job = Job(request=request_kind)

        assert is_priority_job(job) is False
        assert classify(job) is Lane.NORMAL

    def test_exactly_six_priority_kinds(self):
        assert len(PRIORITY_REQUESTS) == 6


class TestDualQueue:
    """Tests for DualQueue."""

    @pytest.fixture
    def registry(self) -> JobRegistry:
        return JobRegistry()

    @pytest.fixture
    def queue(self, registry: JobRegistry) -> DualQueue:
        return DualQueue(registry)

    @pytest.fixture
    def make(self, registry: JobRegistry):
        def _make(request: Request, uri: str | None = None) -> EnqueuedJob:
            return registry.register(Job(request=request, uri=uri))

        return _make

    def test_normal_jobs_are_fifo(self, queue: DualQueue, make):
        """Test that non-check jobs are appended."""
        first = make(Request.LSP_HOVER)
        second = make(Request.LSP_COMPLETE)
        queue.push_normal(first)
        queue.push_normal(second)

        assert queue.dequeue() == first
        assert queue.dequeue() == second
        assert queue.dequeue() is None

    def test_check_goes_to_head(self, queue: DualQueue, make):
        """Test that a check job is inserted before queued jobs."""
        hover = make(Request.LSP_HOVER)
        check = make(Request.LSP_CHECK)
        queue.push_normal(hover)
        queue.push_normal(check)

        assert queue.snapshot(Lane.NORMAL) == [check, hover]

    def test_only_latest_check_is_kept(self, queue: DualQueue, make, registry):
        """Test that a second check replaces the first one."""
        hover = make(Request.LSP_HOVER)
        first_check = make(Request.LSP_CHECK)
        goto = make(Request.LSP_GOTO)
        second_check = make(Request.LSP_CHECK)

        for job in (hover, first_check, goto, second_check):
            queue.push_normal(job)

        assert queue.snapshot(Lane.NORMAL) == [second_check, hover, goto]
        assert first_check.id not in registry
        assert second_check.id in registry

    def test_priority_preempts_normal(self, queue: DualQueue, make):
        """Test that the priority lane is drained first."""
        hover = make(Request.LSP_HOVER)
        add = make(Request.API_ADD_URI, "file:///a.flix")
        rem = make(Request.API_REM_PKG, "file:///lib.fpkg")
        queue.push_normal(hover)
        queue.push_priority([add, rem])

        assert queue.dequeue() == add
        assert queue.dequeue() == rem

    def test_check_synthesized_when_priority_lane_empties(self, queue: DualQueue, make, registry):
        """Test that taking the last priority job queues a check at the head."""
        hover = make(Request.LSP_HOVER)
        add = make(Request.API_ADD_URI, "file:///a.flix")
        rem = make(Request.API_REM_URI, "file:///b.flix")
        queue.push_normal(hover)
        queue.push_priority([add, rem])

        queue.dequeue()
        assert queue.lane_length(Lane.NORMAL) == 1

        queue.dequeue()
        normal = queue.snapshot(Lane.NORMAL)
        assert [job.request for job in normal] == [Request.LSP_CHECK, Request.LSP_HOVER]

        check = normal[0]
        assert check.id in registry
        assert queue.dequeue() == check
        assert queue.dequeue() == hover
        assert queue.dequeue() is None

    def test_synthesized_check_replaces_queued_check(self, queue: DualQueue, make, registry):
        """Test that synthesis plus the head rule leaves a single check."""
        old_check = make(Request.LSP_CHECK)
        hover = make(Request.LSP_HOVER)
        add = make(Request.API_ADD_JAR, "file:///lib.jar")
        queue.push_normal(old_check)
        queue.push_normal(hover)
        queue.push_priority([add])

        queue.dequeue()

        normal = queue.snapshot(Lane.NORMAL)
        assert [job.request for job in normal] == [Request.LSP_CHECK, Request.LSP_HOVER]
        assert normal[0].id != old_check.id
        assert old_check.id not in registry

    def test_push_routes_by_lane(self, queue: DualQueue, make):
        """Test that push places jobs in the lane they belong to."""
        queue.push(make(Request.API_ADD_PKG, "file:///lib.fpkg"))
        queue.push(make(Request.LSP_HOVER))

        assert queue.lane_length(Lane.PRIORITY) == 1
        assert queue.lane_length(Lane.NORMAL) == 1
        assert len(queue) == 2

    def test_depth_gauge_is_labelled_per_queue(self, registry: JobRegistry, make):
        """Test that two queues report their depths separately."""
        first = DualQueue(registry, name="first")
        second = DualQueue(registry, name="second")

        first.push_normal(make(Request.LSP_HOVER))
        first.push_normal(make(Request.LSP_GOTO))
        second.push_normal(make(Request.LSP_HOVER))

        assert REGISTRY.get_sample_value(
            "lsp_queue_depth", {"queue": "first", "lane": "normal"}
        ) == 2.0
        assert REGISTRY.get_sample_value(
            "lsp_queue_depth", {"queue": "second", "lane": "normal"}
        ) == 1.0

    def test_drain_all(self, queue: DualQueue, make):
        """Test that draining empties both lanes."""
        queue.push_priority([make(Request.API_ADD_URI, "file:///a.flix")])
        queue.push_normal(make(Request.LSP_HOVER))
        queue.push_normal(make(Request.LSP_CHECK))

        assert queue.drain_all() == 3
        assert len(queue) == 0
        assert queue.dequeue() is None

"""
Tests for the webpilot.runner module.

This module tests:
- Successful runs return the final answer and tool history
- A failing planner triggers browser cleanup and the error is re-raised
- Cleanup errors never mask the planner's error
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from webpilot.exceptions import PlannerError
from webpilot.runner import RunResult, automate


class ScriptedPlanner:
    """Calls a fixed list of tools, then answers."""

    def __init__(self, calls, answer="done"):
        self.calls = calls
        self.answer = answer
        self.cleaned_up = False

    async def run(self, task, registry):
        for name, args in self.calls:
            await registry.call(name, args)
        return self.answer

    async def cleanup(self):
        self.cleaned_up = True


class TestAutomate:
    """Tests for automate."""

    @pytest.mark.asyncio
    async def test_returns_answer_and_history(self, session):
        planner = ScriptedPlanner(
            [("open_browser", {}), ("close_browser", {})],
            answer="All good",
        )

        result = await automate("Open and close", planner=planner, session=session)

        assert isinstance(result, RunResult)
        assert result.final_output == "All good"
        assert [step.tool_name for step in result.steps] == ["open_browser", "close_browser"]
        assert planner.cleaned_up

    @pytest.mark.asyncio
    async def test_browser_left_open_is_closed(self, session, fake_playwright):
        planner = ScriptedPlanner([("open_browser", {})])

        await automate("Open only", planner=planner, session=session)

        assert not session.is_open
        assert fake_playwright.stops == 1

    @pytest.mark.asyncio
    async def test_planner_error_closes_browser_then_reraises(self, session, fake_playwright):
        await session.open()
        planner = Mock()
        planner.run = AsyncMock(side_effect=PlannerError("quota exceeded", status_code=429))
        planner.cleanup = AsyncMock()

        with pytest.raises(PlannerError, match="quota exceeded"):
            await automate("Anything", planner=planner, session=session)

        assert not session.is_open
        assert fake_playwright.browsers[0].closed
        planner.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cleanup_failure_does_not_mask_error(self, session, fake_page):
        await session.open()
        fake_page.close_error = Exception("already gone")
        planner = Mock()
        planner.run = AsyncMock(side_effect=RuntimeError("planner crashed"))
        planner.cleanup = AsyncMock()

        with pytest.raises(RuntimeError, match="planner crashed"):
            await automate("Anything", planner=planner, session=session)

        assert not session.is_open

    @pytest.mark.asyncio
    async def test_cancelled_run_closes_browser(self, session, fake_playwright):
        class CancelledPlanner(ScriptedPlanner):
            async def run(self, task, registry):
                await registry.call("open_browser")
                raise asyncio.CancelledError()

        planner = CancelledPlanner([])

        with pytest.raises(asyncio.CancelledError):
            await automate("Anything", planner=planner, session=session)

        assert not session.is_open
        assert fake_playwright.browsers[0].closed
        assert fake_playwright.stops == 1
        assert planner.cleaned_up

    @pytest.mark.asyncio
    async def test_keyboard_interrupt_closes_browser(self, session):
        await session.open()
        planner = Mock()
        planner.run = AsyncMock(side_effect=KeyboardInterrupt())
        planner.cleanup = AsyncMock()

        with pytest.raises(KeyboardInterrupt):
            await automate("Anything", planner=planner, session=session)

        assert not session.is_open

    @pytest.mark.asyncio
    async def test_planner_without_cleanup(self, session):
        class MinimalPlanner:
            async def run(self, task, registry):
                return f"echo: {task}"

        result = await automate("hello", planner=MinimalPlanner(), session=session)

        assert result.final_output == "echo: hello"
        assert result.steps == []

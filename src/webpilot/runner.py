import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from webpilot.config import BrowserConfig, PlannerConfig
from webpilot.environment.browser_tools import BrowserTools
from webpilot.environment.session import BrowserSession
from webpilot.planner import ChatCompletionsPlanner, Planner
from webpilot.registry import ToolCallRecord, build_browser_registry

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of one automation run."""
    final_output: str
    steps: List[ToolCallRecord] = field(default_factory=list)


async def automate(
    task: str,
    planner: Optional[Planner] = None,
    browser_config: Optional[BrowserConfig] = None,
    planner_config: Optional[PlannerConfig] = None,
    session: Optional[BrowserSession] = None,
) -> RunResult:
    """
    Run one task: wire session, tools and registry, then hand control to the planner.

    If the planner raises or the run is cancelled, the browser is closed on a best-effort basis and
    the original exception is re-raised, so a failed run never leaves a
    browser process behind.

    Args:
        task: Natural-language instruction.
        planner: Planning loop. Defaults to a ChatCompletionsPlanner.
        browser_config: Browser options used when no session is given.
        planner_config: Planner options used when no planner is given.
        session: Existing session to drive instead of a new one.

    Returns:
        RunResult with the planner's final answer and the tool call history.
    """
    session = session or BrowserSession(browser_config or BrowserConfig.from_env())
    registry = build_browser_registry(BrowserTools(session))
    planner = planner or ChatCompletionsPlanner(planner_config or PlannerConfig.from_env())

    try:
        final_output = await planner.run(task, registry)
    except BaseException as e:
        # Includes CancelledError and KeyboardInterrupt
        logger.error(f"Task automation failed: {e!r}")
        try:
            await session.close()
        except Exception as cleanup_error:
            logger.error(f"Cleanup failed: {cleanup_error}")
        raise
    finally:
        cleanup = getattr(planner, "cleanup", None)
        if cleanup is not None:
            try:
                await cleanup()
            except Exception as cleanup_error:
                logger.warning(f"Planner cleanup failed: {cleanup_error}")

    logger.info(f"Task completed successfully: {final_output}")

    if session.is_open:
        logger.info("Planner left the browser open; closing it")
        try:
            await session.close()
        except Exception as cleanup_error:
            logger.warning(f"Error closing browser after run: {cleanup_error}")

    return RunResult(final_output=final_output, steps=list(registry.history))


def run_task(task: str, **kwargs) -> RunResult:
    """Synchronous wrapper around ``automate`` for scripts and the CLI."""
    return asyncio.run(automate(task, **kwargs))

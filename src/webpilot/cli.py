"""
webpilot CLI - drive a browser from a natural-language instruction.

Usage:
    webpilot --help
    webpilot run "Go to https://example.com and click the More information link"
    webpilot tools
"""

import json
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from webpilot import __version__
from webpilot.config import BrowserConfig, PlannerConfig
from webpilot.environment.browser_tools import BrowserTools
from webpilot.environment.session import BrowserSession
from webpilot.exceptions import WebPilotError
from webpilot.registry import build_browser_registry
from webpilot.runner import run_task
from webpilot.utils import init_logging


@click.group()
@click.version_option(version=__version__, prog_name="webpilot")
def main():
    """webpilot - natural-language browser automation.

    Reads GOOGLE_API_KEY (and optional WEBPILOT_* settings) from the
    environment or a .env file in the working directory.
    """
    pass


@main.command()
@click.argument("task")
@click.option("--headless/--headed", default=None, help="Run the browser without a window (default: headed)")
@click.option("--model", default=None, help="Chat model name (default: WEBPILOT_MODEL or gemini-2.5-flash)")
@click.option("--max-steps", type=int, default=None, help="Maximum planner steps")
@click.option("--screenshot-dir", type=click.Path(file_okay=False), default=None, help="Where screenshots are saved")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def run(task: str, headless: Optional[bool], model: Optional[str],
        max_steps: Optional[int], screenshot_dir: Optional[str], verbose: bool):
    """Run TASK in a browser and print the final answer.

    \b
    Examples:
        webpilot run "Open https://example.com and take a screenshot"
        webpilot run "Log in at https://example.test/login" --headless
    """
    load_dotenv()
    init_logging(logging.DEBUG if verbose else logging.INFO)

    browser_config = BrowserConfig.from_env()
    if headless is not None:
        browser_config.headless = headless
    if screenshot_dir:
        browser_config.screenshot_dir = screenshot_dir

    planner_config = PlannerConfig.from_env()
    if model:
        planner_config.model = model
    if max_steps is not None:
        planner_config.max_steps = max_steps

    try:
        result = run_task(task, browser_config=browser_config, planner_config=planner_config)
    except WebPilotError as e:
        click.echo(f"Error: {e.developer_message}", err=True)
        if e.suggestion:
            click.echo(e.suggestion, err=True)
        sys.exit(1)

    click.echo(result.final_output)
    click.echo(f"({len(result.steps)} tool call(s))", err=True)


@main.command()
def tools():
    """Print the tool schemas sent to the planner, as JSON."""
    registry = build_browser_registry(BrowserTools(BrowserSession()))
    click.echo(json.dumps(registry.schemas(), indent=2))


if __name__ == "__main__":
    main()

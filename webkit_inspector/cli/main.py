#!/usr/bin/env python3
"""Main CLI entry point for WebKit Inspector using Typer.

The commands start a single browser session, drive it, print what was
captured and close everything again. They are a convenience for quick
inspection from a terminal; long-lived multi-session use goes through the
tool layer.
"""

import asyncio
import json
import logging
from enum import IntEnum
from pathlib import Path
from typing import Annotated, Any, Dict, Optional

import typer
import yaml

from .. import __version__
from ..capture.query import ALL_LEVELS, filter_by_text
from ..config import InspectorConfig, load_config
from ..errors import ConfigLoadError, InspectorError
from ..tools.dispatcher import ToolDispatcher

CLI_SESSION_ID = "cli"


class ExitCode(IntEnum):
    """CLI exit codes."""
    SUCCESS = 0
    OPERATION_FAILED = 1  # A session operation failed
    CONFIG_ERROR = 2      # Configuration could not be loaded


app = typer.Typer(
    name="webkit-inspector",
    help="WebKit Inspector - capture console and network telemetry from headless browsers",
    add_completion=False,
    rich_markup_mode="rich"
)


def _load_config(
    config_path: Optional[Path],
    headful: bool = False,
    engine: Optional[str] = None,
    verbose: bool = False,
) -> InspectorConfig:
    overrides: Dict[str, Any] = {}
    if headful:
        overrides["headless"] = False
    if engine:
        overrides["engine"] = engine
    if verbose:
        overrides["log_level"] = "DEBUG"

    try:
        config = load_config(config_path, overrides=overrides)
    except ConfigLoadError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    return config


def _run(coro) -> Any:
    """Run a session coroutine, mapping operation failures to exit codes."""
    try:
        return asyncio.run(coro)
    except InspectorError as e:
        typer.echo(f"❌ {e.kind}: {e.message}", err=True)
        raise typer.Exit(code=ExitCode.OPERATION_FAILED.value)


async def _capture(
    config: InspectorConfig,
    url: str,
    level: str,
    grep: Optional[str],
    script: Optional[str],
    screenshot: bool,
) -> Dict[str, Any]:
    dispatcher = ToolDispatcher.from_config(config)
    operations = dispatcher.operations

    async with dispatcher.registry as registry:
        await registry.create(CLI_SESSION_ID)
        await operations.navigate(CLI_SESSION_ID, url)

        result: Dict[str, Any] = {
            "page": (await operations.get_page_info(CLI_SESSION_ID)).to_dict(),
        }

        if script:
            result["scriptResult"] = await operations.execute_script(CLI_SESSION_ID, script)

        if screenshot:
            capture = await operations.take_screenshot(CLI_SESSION_ID)
            result["screenshot"] = str(capture.path)

        console = await operations.get_console_logs(CLI_SESSION_ID, level)
        console = filter_by_text(console, grep, ignore_case=True)
        result["consoleLogs"] = [entry.to_dict() for entry in console]
        result["networkLogs"] = [
            entry.to_dict() for entry in await operations.get_network_logs(CLI_SESSION_ID)
        ]
        result["metrics"] = (await operations.get_performance_metrics(CLI_SESSION_ID)).to_dict()

    return result


def _print_capture(result: Dict[str, Any]) -> None:
    page = result["page"]
    typer.echo(f"🌐 {page['title'] or '(untitled)'} - {page['url']}")

    if "scriptResult" in result:
        typer.echo(f"📜 Script result: {json.dumps(result['scriptResult'], default=str)}")
    if "screenshot" in result:
        typer.echo(f"📸 Screenshot saved to: {result['screenshot']}")

    typer.echo(f"\nConsole ({len(result['consoleLogs'])} entries)")
    for entry in result["consoleLogs"]:
        typer.echo(f"  [{entry['level']}] {entry['message']}")

    typer.echo(f"\nNetwork ({len(result['networkLogs'])} entries)")
    for entry in result["networkLogs"]:
        status = entry.get("status") or entry.get("failure") or "pending"
        typer.echo(f"  {status} {entry['url']}")


@app.callback()
def main():
    """
    WebKit Inspector - headless browser sessions with console and network capture.
    """
    pass


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"WebKit Inspector v{__version__}")


@app.command()
def capture(
    url: Annotated[str, typer.Argument(help="URL to load")],
    level: Annotated[
        str,
        typer.Option("--level", "-l", help="Console level to show (LOG, INFO, WARNING, ERROR, DEBUG) or ALL")
    ] = ALL_LEVELS,
    grep: Annotated[
        Optional[str],
        typer.Option("--grep", "-g", help="Only show console messages containing this text")
    ] = None,
    script: Annotated[
        Optional[str],
        typer.Option("--script", help="Script body to evaluate after the page loads")
    ] = None,
    screenshot: Annotated[
        bool,
        typer.Option("--screenshot", help="Save a viewport screenshot")
    ] = False,
    headful: Annotated[
        bool,
        typer.Option("--headful", help="Run browser with a window")
    ] = False,
    engine: Annotated[
        Optional[str],
        typer.Option("--engine", help="Browser engine (webkit, chromium, firefox)")
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results as JSON")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logging")
    ] = False,
):
    """
    Load a page and print the console and network activity it produced.

    Examples:

        # Errors logged while loading a page
        webkit-inspector capture https://example.com --level ERROR

        # Everything as JSON, plus a screenshot
        webkit-inspector capture https://example.com --json --screenshot
    """
    config = _load_config(config_path, headful=headful, engine=engine, verbose=verbose)
    result = _run(_capture(config, url, level.upper(), grep, script, screenshot))

    if json_output:
        typer.echo(json.dumps(result, indent=2, default=str))
    else:
        _print_capture(result)


async def _inspect(config: InspectorConfig, url: str, selector: str) -> Dict[str, Any]:
    dispatcher = ToolDispatcher.from_config(config)
    async with dispatcher.registry as registry:
        await registry.create(CLI_SESSION_ID)
        await dispatcher.operations.navigate(CLI_SESSION_ID, url)
        inspection = await dispatcher.operations.inspect_element(CLI_SESSION_ID, selector)
    return inspection.to_dict()


@app.command()
def inspect(
    url: Annotated[str, typer.Argument(help="URL to load")],
    selector: Annotated[str, typer.Argument(help="Selector of the element to inspect")],
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logging")
    ] = False,
):
    """Load a page and describe the first element matching a selector."""
    config = _load_config(config_path, verbose=verbose)
    result = _run(_inspect(config, url, selector))
    typer.echo(json.dumps(result, indent=2))


@app.command(name="show-config")
def show_config(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,
):
    """Print the effective configuration."""
    try:
        config = load_config(config_path)
    except ConfigLoadError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    typer.echo(yaml.safe_dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=True))


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    app()

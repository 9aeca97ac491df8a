"""
OXTest - command line entry point.

Checks .ox.test scripts and converts them to Playwright tests.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from oxtest import __version__
from oxtest.config.settings import get_settings
from oxtest.converters.playwright import ConversionOptions, PlaywrightConverter
from oxtest.error_handling import OxtestError, ParseError
from oxtest.monitoring.logger import get_logger, setup_logging
from oxtest.parsing.script import OxtestParser, ParsedScript

console = Console()
logger = get_logger("oxtest.main")


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="oxtest",
        description=f"OXTest - browser automation command language v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check scripts for grammar errors
  oxtest check tests/login.ox.test tests/cart.ox.test

  # Report every bad line instead of stopping at the first
  oxtest check --skip-invalid tests/login.ox.test

  # Convert a script to a Playwright test
  oxtest convert tests/login.ox.test --name "user can log in" -o login.spec.ts
        """,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with verbose logging",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose structured logging output (JSON)",
    )

    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser("check", help="Parse scripts and report errors")
    check_parser.add_argument("files", nargs="+", type=Path, help="OXTest script files")
    check_parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Record bad lines and keep going instead of stopping at the first",
    )
    check_parser.add_argument(
        "--show-commands",
        action="store_true",
        help="Print the parsed commands of each script",
    )

    convert_parser = subparsers.add_parser("convert", help="Convert a script to Playwright")
    convert_parser.add_argument("file", type=Path, help="OXTest script file")
    convert_parser.add_argument("--name", help="Test name (default: file stem)")
    convert_parser.add_argument("--base-url", help="Base URL for placeholder code")
    convert_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the generated code here instead of stdout",
    )

    return parser


def show_version() -> int:
    """Show version information."""
    console.print("\n[bold cyan]OXTest - browser automation command language[/bold cyan]")
    console.print(f"Version: [green]{__version__}[/green]")
    return 0


def _render_commands(script: ParsedScript) -> None:
    table = Table(title=script.source, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Command", style="cyan")
    table.add_column("Selector")
    table.add_column("Fallbacks", style="dim")
    table.add_column("Params")

    for index, command in enumerate(script.commands, start=1):
        selector = command.selector
        table.add_row(
            str(index),
            command.type.value,
            escape(str(selector)) if selector else "",
            escape(", ".join(str(fallback) for fallback in selector.fallbacks)) if selector else "",
            escape(", ".join(f"{key}={value}" for key, value in command.params.items())),
        )

    console.print(table)


def check_files(files: List[Path], skip_invalid: bool, show_commands: bool) -> int:
    """Parse each file and report the outcome."""
    parser = OxtestParser(error_policy="skip" if skip_invalid else None)
    failures = 0

    for file_path in files:
        try:
            script = parser.parse_file(file_path)
        except ParseError as e:
            failures += 1
            console.print(f"[red]✗ {file_path}[/red] {escape(e.message)}")
            if e.line:
                console.print(f"  [dim]{escape(e.line)}[/dim]")
            continue
        except OxtestError as e:
            failures += 1
            console.print(f"[red]✗ {escape(e.message)}[/red]")
            continue

        if script.ok:
            console.print(f"[green]✓ {file_path}[/green] {len(script.commands)} commands")
        else:
            failures += 1
            console.print(
                f"[yellow]✗ {file_path}[/yellow] {len(script.commands)} commands, "
                f"{len(script.issues)} invalid lines"
            )
            for issue in script.issues:
                console.print(
                    f"  [yellow]{escape(str(issue))}[/yellow]  [dim]{escape(issue.line)}[/dim]"
                )

        if show_commands:
            _render_commands(script)

    return 1 if failures else 0


def convert_file(
    file_path: Path,
    test_name: Optional[str],
    base_url: Optional[str],
    output: Optional[Path],
) -> int:
    """Convert one script and write or print the result."""
    settings = get_settings()
    try:
        content = file_path.read_text(encoding=settings.script_encoding)
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error reading file: {escape(str(e))}[/red]")
        return 1

    options = ConversionOptions(test_name=test_name or file_path.stem, base_url=base_url)
    result = PlaywrightConverter().convert(content, options)

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {escape(warning)}[/yellow]")

    if output:
        output.write_text(result.code, encoding="utf-8")
        console.print(
            f"[green]Wrote {result.commands_converted} steps to {output}[/green]"
        )
    else:
        console.out(result.code, end="", highlight=False)

    return 0 if result.commands_converted else 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for OXTest.

    Args:
        args: Command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.version:
        return show_version()

    if parsed_args.command is None:
        parser.print_help()
        return 1

    settings = get_settings()
    setup_logging(
        log_level="DEBUG" if parsed_args.debug else settings.log_level,
        log_format="json" if parsed_args.verbose else settings.log_format,
        log_file=settings.log_file,
    )
    logger.debug(f"Running {parsed_args.command}")

    if parsed_args.command == "check":
        return check_files(
            parsed_args.files,
            skip_invalid=parsed_args.skip_invalid,
            show_commands=parsed_args.show_commands,
        )

    return convert_file(
        parsed_args.file,
        test_name=parsed_args.name,
        base_url=parsed_args.base_url,
        output=parsed_args.output,
    )


if __name__ == "__main__":
    sys.exit(main())

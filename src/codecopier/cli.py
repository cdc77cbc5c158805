"""
CLI entrypoint for codecopier package.
"""
from __future__ import annotations

import argparse
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from colorama import Fore, just_fix_windows_console

from . import __version__
from .core import (
    CodeCopierError,
    collect_code,
    debug,
    discover_files,
    echo,
    load_config,
    resolve_config_path,
    write_output,
)
from .selector import PromptSession, select_files

PREVIEW_COUNT = 5


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="codecopier",
        description="Interactively select project files and collect them into one Markdown file.",
    )
    p.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to the configuration file (default: ./.codecopierrc.json)",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("codecopier_output.md"),
        help="Output file name (default: codecopier_output.md)",
    )
    p.add_argument(
        "-z", "--compress", action="store_true", help="Compress the output file with gzip"
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Run with verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def _preview(files: List[str]) -> None:
    echo("First few files found:", Fore.CYAN)
    for f in files[:PREVIEW_COUNT]:
        echo(f"- {f}", Fore.LIGHTBLACK_EX)
    if len(files) > PREVIEW_COUNT:
        echo(f"... and {len(files) - PREVIEW_COUNT} more", Fore.CYAN)


def _report_error(e: BaseException, verbose: bool, header: str = "An error occurred:") -> None:
    echo(header, Fore.RED, file=sys.stderr)
    echo(str(e), Fore.RED, file=sys.stderr)
    if verbose:
        echo(
            "".join(traceback.format_exception(type(e), e, e.__traceback__)),
            Fore.LIGHTBLACK_EX,
            file=sys.stderr,
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Load config, discover, select, collect and write; return the exit code."""
    ns = _parse_args(argv)
    just_fix_windows_console()

    try:
        echo("CodeCopier is starting...", Fore.BLUE)
        root = Path.cwd()
        echo(f"Working in directory: {root}", Fore.BLUE)

        echo("Getting configuration...", Fore.BLUE)
        config_path = resolve_config_path(root, ns.config)
        config = load_config(config_path)
        debug(f"include={config.include} exclude={config.exclude}", ns.verbose)
        echo("Configuration loaded. Searching for files...", Fore.CYAN)

        all_files = discover_files(root, config)
        echo(f"Found {len(all_files)} files", Fore.GREEN)
        if not all_files:
            echo("No files found matching the criteria.", Fore.YELLOW)
            echo(
                "Check your configuration and make sure you're in the correct directory.",
                Fore.CYAN,
            )
            return 0
        if ns.verbose:
            _preview(all_files)

        echo(f"Found {len(all_files)} files. Starting selection process...", Fore.GREEN)
        with PromptSession() as session:
            selected = select_files(all_files, session)

        if not selected:
            echo("No files selected. Exiting...", Fore.YELLOW)
            return 0

        echo(f"{len(selected)} files selected. Collecting code...", Fore.GREEN)
        output = collect_code(root, selected, verbose=ns.verbose)
        written = write_output(output, root / ns.output, compress=ns.compress)
        debug(f"Wrote {len(output)} characters to {written}", ns.verbose)

        echo("CodeCopier completed successfully!", Fore.GREEN)
        return 0

    except KeyboardInterrupt:
        echo("\nOperation cancelled by user.", Fore.YELLOW, file=sys.stderr)
        return 1
    except CodeCopierError as e:
        _report_error(e, ns.verbose)
        return 1
    except Exception as e:
        _report_error(e, ns.verbose, header="Unexpected error:")
        return 1


if __name__ == "__main__":
    sys.exit(main())

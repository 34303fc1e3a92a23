#!/usr/bin/env python3
"""
sizesort command line.

Every option has a single-letter short flag and a long name. Missing values
for the root folder, the output file and the two division lists are asked for
interactively unless -n/--no-prompt is given.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from rich.prompt import Prompt

from . import ui
from .errors import ConfigError
from .pipeline import build_config, generate_report


EXIT_WRITE_FAILED = 5


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sizesort",
        description="Rank every file and folder under a directory by size and write a banded report.",
    )
    p.add_argument("-r", "--root", default=None, help="Folder to scan.")
    p.add_argument("-o", "--output", default=None, help="Report file to write.")
    p.add_argument("-f", "--file-divisions", default=None,
                   help="Band thresholds for files, e.g. '10gb,1gb,500b' ('' for none).")
    p.add_argument("-d", "--folder-divisions", default=None,
                   help="Band thresholds for folders, same syntax as --file-divisions.")
    p.add_argument("-l", "--follow-symlinks", action="store_true",
                   help="Descend into symlinked folders and size symlinked files by target.")
    p.add_argument("-p", "--progress", action="store_true",
                   help="Show a spinner with file/folder counts while scanning.")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging.")
    p.add_argument("-n", "--no-prompt", action="store_true",
                   help="Never prompt; missing divisions default to none.")
    return p.parse_args(argv)


def _fill_missing(args: argparse.Namespace) -> None:
    if args.no_prompt:
        args.root = args.root or ""
        args.output = args.output or ""
        args.file_divisions = args.file_divisions or ""
        args.folder_divisions = args.folder_divisions or ""
        return
    if args.root is None:
        args.root = Prompt.ask("Enter folder", console=ui.console)
    if args.output is None:
        args.output = Prompt.ask("Output to", console=ui.console)
    if args.file_divisions is None:
        args.file_divisions = Prompt.ask(
            "Divisions for files (ex: '' for none, '10gb,1gb,500b' gives >10GB, >1GB, >500B)",
            default="", show_default=False, console=ui.console,
        )
    if args.folder_divisions is None:
        args.folder_divisions = Prompt.ask(
            "Divisions for folders", default="", show_default=False, console=ui.console,
        )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[ui.log_handler()],
    )
    ui.set_verbose(args.verbose)
    _fill_missing(args)

    try:
        config = build_config(
            args.root,
            args.output,
            args.file_divisions,
            args.folder_divisions,
            follow_symlinks=args.follow_symlinks,
        )
    except ConfigError as exc:
        ui.log_error(f"Error: {exc}")
        return exc.exit_code

    ui.log_info(f"Scanning '{config.root}' into '{config.output}'")
    try:
        with ui.scan_progress(enabled=args.progress) as observe:
            outcome = generate_report(config, progress=observe)
    except OSError as exc:
        ui.log_error(f"Could not write report '{config.output}': {exc}")
        return EXIT_WRITE_FAILED

    scan = outcome.scan
    ui.console.print(f"Finished calculating {len(scan.files)} files, {len(scan.dirs_full)} directories")
    if scan.issues:
        ui.log_warning(f"{len(scan.issues)} path(s) could not be read and were counted as 0 bytes (see log).")

    if outcome.patch_error is not None:
        err = outcome.patch_error
        ui.log_warning(f"Report written to '{err.output_path}' but its summary block could not be filled in.")
        if err.temp_path is not None:
            ui.log_warning(f"The patched report is at '{err.temp_path}'.")
    else:
        ui.log_success(f"Report written to '{outcome.output_path}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Main Entry Point for unsafe-density CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `unsafe_density.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from unsafe_density.cli import commands
from unsafe_density import __version__


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="unsafe-density: Count Rust code inside unsafe contexts")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: SCAN ---
  cmd_scan = subparsers.add_parser("scan", help="Classify a Rust file or directory")
  cmd_scan.add_argument("path", type=Path, help="Input source file or directory")
  cmd_scan.add_argument("--json", action="store_true", help="Print a JSON report to stdout")
  cmd_scan.add_argument("--functions", action="store_true", help="Include a per-function breakdown")
  cmd_scan.add_argument(
    "--descend-modules",
    action="store_true",
    default=None,
    help="Also classify the items inside inline `mod` blocks (Overrides config)",
  )
  cmd_scan.add_argument(
    "--strict",
    action="store_true",
    default=None,
    help="Stop at the first file that cannot be classified (Overrides config)",
  )
  cmd_scan.add_argument(
    "--exclude",
    nargs="*",
    default=None,
    help="Extra glob patterns of files to skip, relative to the scanned directory",
  )

  # --- Command: KINDS ---
  cmd_kinds = subparsers.add_parser("kinds", help="List node kinds the classifier supports")
  cmd_kinds.add_argument("--json", action="store_true", help="Print a JSON object to stdout")

  args = parser.parse_args(argv)

  if args.command == "scan":
    return commands.handle_scan(
      args.path,
      json_mode=args.json,
      functions=args.functions,
      descend_modules=args.descend_modules,
      strict=args.strict,
      exclude=args.exclude,
    )

  elif args.command == "kinds":
    return commands.handle_kinds(json_mode=args.json)

  return 0


if __name__ == "__main__":
  sys.exit(main())

"""
Scan Command Handler.

Classifies a Rust file or every `.rs` file under a directory and reports safe
and unsafe leaf counts together with the resulting unsafe density.
"""

import json
from pathlib import Path
from typing import List, Optional

from rich.table import Table

from unsafe_density.config import RuntimeConfig
from unsafe_density.core.engine import DensityEngine
from unsafe_density.core.report import BatchReport, FileReport, density
from unsafe_density.utils.console import console, log_error, log_info, log_success, log_warning


def collect_sources(path: Path, config: RuntimeConfig) -> List[Path]:
  """
  Lists the Rust sources to classify.

  Args:
      path: A single file, or a directory searched recursively for `*.rs`.
      config: Settings holding the exclude patterns.

  Returns:
      Sorted list of files. A file given directly is never excluded.
  """
  if path.is_file():
    return [path]
  return sorted(p for p in path.rglob("*.rs") if p.is_file() and not config.is_excluded(p.relative_to(path)))


def handle_scan(
  path: Path,
  json_mode: bool = False,
  functions: bool = False,
  descend_modules: Optional[bool] = None,
  strict: Optional[bool] = None,
  exclude: Optional[List[str]] = None,
) -> int:
  """
  Handles the 'scan' command execution.

  Args:
      path: Input source file or directory.
      json_mode: If True, output JSON to stdout and suppress Rich logs.
      functions: If True, include the per-function breakdown.
      descend_modules: Override for classifying inline module bodies.
      strict: Override for stopping at the first failed file.
      exclude: Extra exclude patterns.

  Returns:
      int: Exit code (0 if every file classified, 1 otherwise).
  """
  if not path.exists():
    log_error(f"Path not found: {path}")
    return 1

  try:
    config = RuntimeConfig.load(
      descend_modules=descend_modules,
      strict_mode=strict,
      exclude=exclude,
      search_path=path if path.is_dir() else path.parent,
    )
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  files = collect_sources(path, config)
  if not files:
    if not json_mode:
      log_warning(f"No .rs files found in {path}")
    return 0

  if not json_mode:
    log_info(f"Scanning {len(files)} files under [path]{path}[/path]...")

  engine = DensityEngine(config)
  batch = BatchReport()

  for src_file in files:
    display = src_file.relative_to(path).as_posix() if path.is_dir() else str(src_file)
    result = engine.run_file(src_file, functions=functions)
    report = FileReport(
      path=display,
      summary=result.summary,
      error="; ".join(result.errors) if not result.success else None,
      functions=result.functions,
    )
    batch.files.append(report)

    if not report.success:
      # In JSON mode the error is part of the report; stdout stays pure JSON.
      if not json_mode:
        log_error(f"{display}: {report.error}")
      if config.strict_mode:
        break

  if json_mode:
    print(json.dumps(batch.to_dict(), indent=2))
    return 1 if batch.failures else 0

  _render_files(batch)
  if functions:
    _render_functions(batch)

  total = batch.total
  console.print(f"[bold]Unsafe Density Summary for {path.name or path}[/bold]")
  console.print(f"Files classified:  {len(batch.files) - len(batch.failures)}/{len(files)}")
  console.print(f"Safe leaves:       [safe]{total.safe_count}[/safe]")
  console.print(f"Unsafe leaves:     [unsafe]{total.unsafe_count}[/unsafe]")
  console.print(f"Unsafe density:    [blue]{density(total) * 100:.2f}%[/blue]")

  if batch.failures:
    log_warning(f"Classification incomplete for {len(batch.failures)} file(s).")
    return 1

  log_success("All files classified.")
  return 0


def _render_files(batch: BatchReport) -> None:
  table = Table(title="Unsafe Density per File")
  table.add_column("File", style="cyan")
  table.add_column("Safe", justify="right", style="green")
  table.add_column("Unsafe", justify="right", style="red")
  table.add_column("Density", justify="right")

  for report in batch.files:
    if report.summary is None:
      table.add_row(report.path, "-", "-", "[error]failed[/error]")
      continue
    table.add_row(
      report.path,
      str(report.summary.safe_count),
      str(report.summary.unsafe_count),
      f"{density(report.summary) * 100:.2f}%",
    )

  console.print(table)


def _render_functions(batch: BatchReport) -> None:
  table = Table(title="Unsafe Density per Function")
  table.add_column("File", style="cyan")
  table.add_column("Function", style="bold")
  table.add_column("Line", justify="right", style="dim")
  table.add_column("Safe", justify="right", style="green")
  table.add_column("Unsafe", justify="right", style="red")
  table.add_column("Density", justify="right")

  for report in batch.files:
    for fn in report.functions:
      name = f"unsafe {fn.name}" if fn.declared_unsafe else fn.name
      table.add_row(
        report.path,
        name,
        str(fn.line),
        str(fn.summary.safe_count),
        str(fn.summary.unsafe_count),
        f"{fn.density * 100:.2f}%",
      )

  console.print(table)

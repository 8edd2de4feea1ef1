"""
Kinds Command Handler.

Lists the tree-sitter node kinds the classifier has explicit rules for. Any
kind not listed makes classification fail with an unsupported-construct error.
"""

import json

from rich.table import Table

from unsafe_density.analysis.classifier import UnsafetyClassifier
from unsafe_density.utils.console import console


def handle_kinds(json_mode: bool = False) -> int:
  """
  Prints the supported node kinds per dispatch category.

  Args:
      json_mode: If True, print a JSON object instead of a table.

  Returns:
      int: Exit code (always 0).
  """
  coverage = UnsafetyClassifier.supported_kinds()

  if json_mode:
    print(json.dumps(coverage, indent=2))
    return 0

  table = Table(title="Supported Node Kinds")
  table.add_column("Category", style="cyan")
  table.add_column("Count", justify="right")
  table.add_column("Kinds", style="dim")
  for category, kinds in coverage.items():
    table.add_row(category, str(len(kinds)), ", ".join(kinds))

  console.print(table)
  return 0

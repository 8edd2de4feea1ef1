"""
Result containers and density arithmetic.

The classifier only produces counters. Turning them into a ratio, attaching
them to files or functions, and serializing them for output happens here.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from unsafe_density.core.summary import Summary, fold


def density(summary: Summary) -> float:
  """
  Share of leaves that sit inside an unsafe scope.

  Args:
      summary (Summary): Classified counts.

  Returns:
      float: `unsafe / (safe + unsafe)`, or 0.0 when no leaves were counted.
  """
  if summary.total == 0:
    return 0.0
  return summary.unsafe_count / summary.total


class FunctionReport(BaseModel):
  """
  Inclusive counts for a single `fn` item.
  """

  name: str = Field(description="Function identifier.")
  line: int = Field(description="1-based line of the declaration.")
  declared_unsafe: bool = Field(default=False, description="True if declared `unsafe fn`.")
  summary: Summary = Field(description="Counts for the function and everything nested in it.")

  @property
  def density(self) -> float:
    return density(self.summary)


class FileReport(BaseModel):
  """
  Classification outcome for a single source file.
  """

  path: str = Field(description="Path of the file as displayed to the user.")
  summary: Optional[Summary] = Field(default=None, description="Counts, or None if classification failed.")
  error: Optional[str] = Field(default=None, description="Reason classification failed.")
  functions: List[FunctionReport] = Field(default_factory=list, description="Per-function breakdown, if requested.")

  @property
  def success(self) -> bool:
    return self.error is None and self.summary is not None

  def to_dict(self) -> Dict[str, Any]:
    """
    Flattens the report for JSON output.

    Returns:
        Dict[str, Any]: Serializable mapping with the computed density included.
    """
    item: Dict[str, Any] = {"path": self.path, "success": self.success}
    if self.summary is not None:
      item["safe"] = self.summary.safe_count
      item["unsafe"] = self.summary.unsafe_count
      item["density"] = round(density(self.summary), 6)
    if self.error is not None:
      item["error"] = self.error
    if self.functions:
      item["functions"] = [
        {
          "name": fn.name,
          "line": fn.line,
          "declared_unsafe": fn.declared_unsafe,
          "safe": fn.summary.safe_count,
          "unsafe": fn.summary.unsafe_count,
          "density": round(fn.density, 6),
        }
        for fn in self.functions
      ]
    return item


class BatchReport(BaseModel):
  """
  Reports for every file of a scan.
  """

  files: List[FileReport] = Field(default_factory=list)

  @property
  def failures(self) -> List[FileReport]:
    return [f for f in self.files if not f.success]

  @property
  def total(self) -> Summary:
    """
    Combined counts of every successfully classified file.

    Returns:
        Summary: Fold of the per-file summaries.
    """
    return fold(f.summary for f in self.files if f.summary is not None)

  def to_dict(self) -> Dict[str, Any]:
    total = self.total
    return {
      "files": [f.to_dict() for f in self.files],
      "total": {
        "safe": total.safe_count,
        "unsafe": total.unsafe_count,
        "density": round(density(total), 6),
      },
      "failed": len(self.failures),
    }

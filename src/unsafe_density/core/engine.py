"""
Orchestration Engine for Unsafe Density Analysis.

This module provides the `DensityEngine`, the driver that ties the parser and
the classifier together:

1.  **Parsing**: Rust source text is parsed with tree-sitter. Malformed input
    raises `ParseFailure` and classification is never attempted.
2.  **Classification**: The `UnsafetyClassifier` folds every top-level item
    into a `Summary`.
3.  **Result Packaging**: `run` and `run_file` convert classification errors
    into a failed `AnalysisResult` so batch drivers can report and continue.
"""

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field
from tree_sitter import Tree

from unsafe_density.analysis.classifier import UnsafetyClassifier
from unsafe_density.config import RuntimeConfig
from unsafe_density.core.errors import ClassificationError
from unsafe_density.core.parser import RustParser
from unsafe_density.core.report import FunctionReport
from unsafe_density.core.summary import Summary

logger = logging.getLogger(__name__)


class AnalysisResult(BaseModel):
  """
  Structured result of classifying one unit of source.
  """

  summary: Optional[Summary] = Field(default=None, description="Counts, present only on success.")
  functions: List[FunctionReport] = Field(default_factory=list, description="Per-function breakdown.")
  errors: List[str] = Field(default_factory=list, description="Error messages encountered.")
  success: bool = Field(default=True, description="True if the whole tree was classified.")

  @property
  def has_errors(self) -> bool:
    return len(self.errors) > 0


class DensityEngine:
  """
  Parses and classifies Rust source.

  Attributes:
      config (RuntimeConfig): Active settings.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None):
    self.config = config or RuntimeConfig()
    self._parser = RustParser()
    self._classifier = UnsafetyClassifier(self.config)

  def parse(self, code: str) -> Tree:
    """
    Parses source string into a tree-sitter Tree.

    Args:
        code (str): Rust source code.

    Returns:
        Tree: The parsed syntax tree.

    Raises:
        ParseFailure: If the input is not well-formed Rust.
    """
    return self._parser.parse(code)

  def classify(self, tree: Tree) -> Summary:
    """
    Classifies an already parsed tree.

    Args:
        tree (Tree): The syntax tree.

    Returns:
        Summary: Safe and unsafe leaf counts.

    Raises:
        UnsupportedConstruct: If a node kind has no classification rule.
    """
    return self._classifier.classify_tree(tree)

  def breakdown(self, code: str) -> List[FunctionReport]:
    """
    Parses source and reports every function separately.

    Args:
        code (str): Rust source code.

    Returns:
        List[FunctionReport]: Per-function inclusive counts in source order.

    Raises:
        ClassificationError: On parse failure or unsupported constructs.
    """
    return self._classifier.function_reports(self.parse(code))

  def run(self, code: str, functions: bool = False) -> AnalysisResult:
    """
    Executes parsing and classification, capturing errors in the result.

    Args:
        code (str): Rust source code.
        functions (bool): If True, also compute the per-function breakdown.

    Returns:
        AnalysisResult: Counts on success, error messages otherwise.
    """
    try:
      tree = self.parse(code)
      summary = self.classify(tree)
      reports = self._classifier.function_reports(tree) if functions else []
    except ClassificationError as e:
      logger.debug(f"Classification failed: {e}")
      return AnalysisResult(success=False, errors=[str(e)])
    return AnalysisResult(summary=summary, functions=reports)

  def run_file(self, path: Path, functions: bool = False) -> AnalysisResult:
    """
    Reads a file as UTF-8 and runs the pipeline on it.

    Args:
        path (Path): Rust source file.
        functions (bool): If True, also compute the per-function breakdown.

    Returns:
        AnalysisResult: Counts on success; read, decode or classification errors otherwise.
    """
    try:
      code = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
      return AnalysisResult(success=False, errors=[f"Could not read {path}: {e}"])
    return self.run(code, functions=functions)

"""
Error types raised while parsing or classifying Rust source.

Both errors derive from `ClassificationError` so callers can handle the whole
family with one `except` clause. Neither is ever swallowed by the core: an
input either classifies completely or raises one of these.
"""

from typing import Optional


class ClassificationError(Exception):
  """Base class for all failures of a classification pass."""


class ParseFailure(ClassificationError):
  """
  The source text could not be turned into a syntax tree.

  Attributes:
      line (Optional[int]): 1-based line of the first syntax error, if known.
      column (Optional[int]): 1-based column of the first syntax error, if known.
  """

  def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
    self.line = line
    self.column = column
    if line is not None:
      message = f"{message} (line {line}, column {column})"
    super().__init__(message)


class UnsupportedConstruct(ClassificationError):
  """
  The classifier met a node kind it has no rule for.

  Attributes:
      kind (str): The tree-sitter node type, e.g. ``"ERROR"``.
      category (str): Dispatch table that rejected it (``item``, ``statement`` or ``expression``).
      line (Optional[int]): 1-based line of the node, if known.
      column (Optional[int]): 1-based column of the node, if known.
  """

  def __init__(self, kind: str, category: str, line: Optional[int] = None, column: Optional[int] = None):
    self.kind = kind
    self.category = category
    self.line = line
    self.column = column
    location = f" at line {line}, column {column}" if line is not None else ""
    super().__init__(f"classification incomplete: {category} construct '{kind}' is not supported{location}")

"""
Rust Source Parser.

Thin wrapper around `tree-sitter` and the `tree-sitter-rust` grammar. Tree-sitter
is error tolerant and always returns a tree, marking malformed regions with
``ERROR`` or missing nodes. `RustParser.parse` inspects the result and raises
`ParseFailure` instead of handing a damaged tree to the classifier.
"""

import logging
from typing import Optional

import tree_sitter_rust as tsrust
from tree_sitter import Language, Node, Parser, Tree

from unsafe_density.core.errors import ParseFailure

logger = logging.getLogger(__name__)

RUST_LANGUAGE = Language(tsrust.language())


def _first_error_node(root: Node) -> Optional[Node]:
  """
  Finds the first ``ERROR`` or missing node in document order.

  Args:
      root (Node): Node to search under.

  Returns:
      Optional[Node]: The offending node, or None if the subtree is clean.
  """
  stack = [root]
  while stack:
    node = stack.pop()
    if node.type == "ERROR" or node.is_missing:
      return node
    # Only subtrees flagged with has_error can contain the culprit.
    stack.extend(reversed([child for child in node.children if child.has_error or child.is_missing]))
  return None


class RustParser:
  """
  Parses Rust source text into a tree-sitter `Tree`.
  """

  def __init__(self) -> None:
    self._parser = Parser(RUST_LANGUAGE)

  def parse(self, code: str) -> Tree:
    """
    Parses source text.

    Args:
        code (str): Rust source code.

    Returns:
        Tree: The syntax tree, guaranteed to contain no error nodes.

    Raises:
        ParseFailure: If the text is not well-formed Rust.
    """
    tree = self._parser.parse(code.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
      bad = _first_error_node(root)
      if bad is None:
        raise ParseFailure("malformed Rust source")
      what = f"missing '{bad.type}'" if bad.is_missing else "unexpected syntax"
      line, column = bad.start_point[0] + 1, bad.start_point[1] + 1
      logger.debug(f"Parse failure: {what} at {line}:{column}")
      raise ParseFailure(f"malformed Rust source: {what}", line=line, column=column)
    return tree


def parse(code: str) -> Tree:
  """
  Convenience wrapper around a one-off `RustParser`.

  Args:
      code (str): Rust source code.

  Returns:
      Tree: The parsed syntax tree.

  Raises:
      ParseFailure: If the text is not well-formed Rust.
  """
  return RustParser().parse(code)

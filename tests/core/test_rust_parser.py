"""
Tests for the tree-sitter Rust parser wrapper.
"""

import pytest

from unsafe_density.core.errors import ClassificationError, ParseFailure
from unsafe_density.core.parser import RustParser, parse


def test_parse_valid_source():
  tree = RustParser().parse("fn main() {}")
  assert tree.root_node.type == "source_file"
  assert not tree.root_node.has_error


def test_parse_empty_source():
  tree = parse("")
  assert tree.root_node.type == "source_file"
  assert tree.root_node.named_child_count == 0


def test_parse_failure_on_malformed_source():
  with pytest.raises(ParseFailure) as excinfo:
    parse("fn main( {")
  assert isinstance(excinfo.value, ClassificationError)
  assert "malformed Rust source" in str(excinfo.value)


def test_parse_failure_reports_location():
  with pytest.raises(ParseFailure) as excinfo:
    parse("fn ok() {}\nfn broken( {\n")
  err = excinfo.value
  assert err.line is not None
  assert err.line >= 1
  assert err.column >= 1


def test_parse_failure_message_without_location():
  err = ParseFailure("malformed Rust source")
  assert err.line is None
  assert str(err) == "malformed Rust source"

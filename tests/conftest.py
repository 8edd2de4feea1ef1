"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Console isolation so Rich output and logs are captured in a buffer.
- Helpers to parse Rust snippets.
"""

import io
import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'unsafe_density' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from unsafe_density.core.parser import RustParser
from unsafe_density.utils.console import build_console, reset_console, set_console


@pytest.fixture(autouse=True)
def console_buffer():
  """
  Routes the shared console (and logging) into an in-memory buffer.

  Keeps stdout clean for tests that parse JSON output and lets table tests
  inspect what would have been rendered.
  """
  buffer = io.StringIO()
  set_console(build_console(file=buffer, width=200, color_system=None))
  yield buffer
  reset_console()


@pytest.fixture
def parse_rust():
  """Returns a callable that parses Rust source into a tree-sitter Tree."""
  parser = RustParser()
  return parser.parse

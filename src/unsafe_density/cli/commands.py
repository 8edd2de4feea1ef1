"""
CLI Command Handlers Facade.

Re-exports handlers from `unsafe_density.cli.handlers` so the dispatcher and
tests patch a single module.
"""

from unsafe_density.cli.handlers.kinds import handle_kinds
from unsafe_density.cli.handlers.scan import handle_scan

__all__ = [
  "handle_kinds",
  "handle_scan",
]

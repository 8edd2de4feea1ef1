from .kinds import handle_kinds
from .scan import handle_scan, collect_sources

__all__ = [
  "collect_sources",
  "handle_kinds",
  "handle_scan",
]

"""
Central Logging and Console Utilities.

Application output goes through the standard `logging` library, rendered by
`rich`. The Rich console sits behind a proxy so the destination (stdout or an
in-memory buffer in tests) can be swapped at runtime via `set_console` while
modules keep importing the same `console` object.

Attributes:
    console (_ConsoleProxy): A global, stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Between INFO and WARNING.
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "safe": "green",
    "unsafe": "bold red",
  }
)


def build_console(**kwargs: Any) -> Console:
  """
  Creates a Rich Console that understands the application's style names.

  Args:
      **kwargs: Options passed to `rich.console.Console` (e.g. `file`, `width`).

  Returns:
      Console: A themed console.
  """
  return Console(theme=_THEME, **kwargs)


class _ConsoleProxy:
  """
  A Proxy wrapper around `rich.console.Console`.

  When the backend changes, the proxy also rebinds the `RichHandler` on the
  root logger so `logging.info(...)` follows the new destination.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    self._backend: Console = build_console()
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates logging handlers.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """
    Points the proxy back at a fresh themed stdout console.
    """
    self._backend = build_console()
    self._configure_logging()

  @property
  def backend(self) -> Console:
    """
    The console currently receiving output.

    Returns:
        Console: The active backend.
    """
    return self._backend

  def _configure_logging(self) -> None:
    """
    Rebinds the root logger's single `RichHandler` to the active backend.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
      if isinstance(handler, RichHandler):
        root_logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(rich_handler)

  def print(self, *args: Any, **kwargs: Any) -> None:
    """Renders tables and summary lines on the active backend."""
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    """Anything else (`get_style`, `export_text`, ...) comes from the backend."""
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Injects a console instance for both printing and logging.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """
  Resets logging and console to standard output.
  """
  console.reset()


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): The message content. Can include rich markup like [bold].
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  """
  Logs a completion message at the SUCCESS level.

  Args:
      msg (str): The message content.
  """
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning, e.g. an empty scan or files left unclassified.

  Args:
      msg (str): The message content.
  """
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error message.

  Args:
      msg (str): The message content.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})

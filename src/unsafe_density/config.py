"""
Runtime Configuration Store.

Settings are read from the ``[tool.unsafe_density]`` table of the nearest
``pyproject.toml`` and may be overridden from the command line.
"""

import fnmatch
import sys
from pathlib import Path, PurePath
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib


class RuntimeConfig(BaseModel):
  """
  Configuration container for the classifier and the batch driver.
  """

  descend_modules: bool = Field(
    False,
    description="If True, inline `mod` bodies are classified in addition to the module's own leaf.",
  )
  exclude: List[str] = Field(
    default_factory=lambda: ["target/*"],
    description="Glob patterns (relative to the scanned directory) of files to skip.",
  )
  strict_mode: bool = Field(False, description="If True, abort a batch on the first file that fails.")

  @field_validator("exclude")
  @classmethod
  def validate_exclude(cls, v: List[str]) -> List[str]:
    """
    Normalizes exclude patterns.

    Args:
        v (List[str]): Raw patterns.

    Returns:
        List[str]: Stripped patterns using forward slashes.

    Raises:
        ValueError: If a pattern is empty.
    """
    cleaned = []
    for pattern in v:
      pattern = pattern.strip().replace("\\", "/")
      if not pattern:
        raise ValueError("Exclude patterns must not be empty.")
      cleaned.append(pattern)
    return cleaned

  def is_excluded(self, relative_path: PurePath) -> bool:
    """
    Checks a path against the exclude patterns.

    Args:
        relative_path (PurePath): Path relative to the scan root.

    Returns:
        bool: True if any pattern matches.
    """
    posix = relative_path.as_posix()
    return any(fnmatch.fnmatch(posix, pattern) for pattern in self.exclude)

  @classmethod
  def load(
    cls,
    descend_modules: Optional[bool] = None,
    strict_mode: Optional[bool] = None,
    exclude: Optional[List[str]] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        descend_modules (Optional[bool]): Override for module descent.
        strict_mode (Optional[bool]): Override for strict mode.
        exclude (Optional[List[str]]): Extra exclude patterns, appended to the TOML ones.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    settings: Dict[str, Any] = {}

    if descend_modules is not None:
      settings["descend_modules"] = descend_modules
    elif "descend_modules" in toml_config:
      settings["descend_modules"] = toml_config["descend_modules"]

    if strict_mode is not None:
      settings["strict_mode"] = strict_mode
    elif "strict_mode" in toml_config:
      settings["strict_mode"] = toml_config["strict_mode"]

    if "exclude" in toml_config or exclude:
      base = toml_config.get("exclude", ["target/*"])
      settings["exclude"] = [*base, *(exclude or [])]

    return cls(**settings)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      with open(toml_path, "rb") as f:
        data = tomllib.load(f)
      tool_section = data.get("tool", {})
      return tool_section.get("unsafe_density", {}), parent

  return {}, None

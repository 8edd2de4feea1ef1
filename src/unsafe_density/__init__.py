"""
unsafe-density Package.

Static estimate of how much Rust code executes inside `unsafe` contexts. Each
leaf construct (a call, an opaque macro invocation, a value expression, a
function entry) is counted as safe or unsafe depending on whether it is
lexically nested in an `unsafe { }` block or an `unsafe fn`.

Usage
-----

Simple String Classification
^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import unsafe_density as ud
    summary = ud.classify_source("fn main() { unsafe { foreign(); } }")
    print(summary.safe_count, summary.unsafe_count)
    # 1 1

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from unsafe_density import DensityEngine, RuntimeConfig

    engine = DensityEngine(RuntimeConfig(descend_modules=True))
    res = engine.run(code)

    if res.success:
        print(res.summary)
    else:
        print(f"Errors: {res.errors}")

Macro invocations are never expanded: each one counts as a single leaf.
"""

from typing import Optional

from unsafe_density.config import RuntimeConfig
from unsafe_density.core.engine import AnalysisResult, DensityEngine
from unsafe_density.core.errors import ClassificationError, ParseFailure, UnsupportedConstruct
from unsafe_density.core.summary import Summary, fold

__version__ = "0.0.1"


def classify_source(code: str, config: Optional[RuntimeConfig] = None) -> Summary:
  """
  Parses and classifies a string of Rust code.

  Args:
      code (str): The Rust source to classify.
      config (RuntimeConfig, optional): Classifier settings.

  Returns:
      Summary: Safe and unsafe leaf counts.

  Raises:
      ParseFailure: If the code is not well-formed Rust.
      UnsupportedConstruct: If the code uses a construct with no classification rule.
  """
  engine = DensityEngine(config)
  return engine.classify(engine.parse(code))


__all__ = [
  "AnalysisResult",
  "ClassificationError",
  "DensityEngine",
  "ParseFailure",
  "RuntimeConfig",
  "Summary",
  "UnsupportedConstruct",
  "classify_source",
  "fold",
  "__version__",
]

"""
Safe/Unsafe Leaf Counters.

This module defines `Summary`, the value type produced by every classification
step. A summary is a pair of non-negative counters that are combined by
counter-wise addition. Because addition is associative and commutative with
`Summary(0, 0)` as identity, children of a node can be folded in any order
(or in any partition) and still yield the same total.
"""

from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field


class Summary(BaseModel):
  """
  Immutable count of safe and unsafe leaves.

  Attributes:
      safe_count (int): Leaves classified outside any unsafe scope.
      unsafe_count (int): Leaves classified inside an unsafe block or unsafe function.
  """

  model_config = ConfigDict(frozen=True)

  safe_count: int = Field(default=0, ge=0, description="Number of leaves outside unsafe scopes.")
  unsafe_count: int = Field(default=0, ge=0, description="Number of leaves inside unsafe scopes.")

  @classmethod
  def leaf(cls, is_unsafe: bool) -> "Summary":
    """
    Builds the single-unit summary for one leaf construct.

    Args:
        is_unsafe (bool): The ambient unsafety flag at the leaf.

    Returns:
        Summary: `(0, 1)` if unsafe, `(1, 0)` otherwise.
    """
    if is_unsafe:
      return cls(safe_count=0, unsafe_count=1)
    return cls(safe_count=1, unsafe_count=0)

  def combine(self, other: "Summary") -> "Summary":
    """
    Counter-wise sum of two summaries.

    Args:
        other (Summary): The summary to add.

    Returns:
        Summary: A new summary; neither operand is modified.
    """
    return Summary(
      safe_count=self.safe_count + other.safe_count,
      unsafe_count=self.unsafe_count + other.unsafe_count,
    )

  def __add__(self, other: "Summary") -> "Summary":
    if not isinstance(other, Summary):
      return NotImplemented
    return self.combine(other)

  @property
  def total(self) -> int:
    """
    Total number of leaves folded into this summary.

    Returns:
        int: `safe_count + unsafe_count`.
    """
    return self.safe_count + self.unsafe_count


EMPTY = Summary()


def fold(items: Iterable[Summary]) -> Summary:
  """
  Combines a sequence of summaries, starting from the identity.

  Args:
      items (Iterable[Summary]): Any iterable of summaries (may be empty or lazy).

  Returns:
      Summary: The combined summary.
  """
  result = EMPTY
  for item in items:
    result = result.combine(item)
  return result

"""
Unsafe Density Classifier.

This module provides the `UnsafetyClassifier`, a walker over a tree-sitter
Rust syntax tree that counts leaf constructs as safe or unsafe.

The walk carries a single boolean, the *ambient unsafety*, by value:

1.  **Items**: `unsafe fn` turns the flag on for its own leaf and its body.
    Modules contribute one leaf; impls, traits and extern blocks fold their members.
2.  **Statements**: expression statements, tail expressions and `let`
    initializers recurse into expressions with the flag unchanged.
3.  **Expressions**: calls and value expressions are leaves that also fold their
    operands. `unsafe { }` folds its statements with the flag forced on and adds
    no leaf for the block itself. Macro invocations are opaque leaves.

Dispatch is table driven per category. A rule does not recurse: it returns the
node's own contribution plus the child nodes still to visit, and `_walk` drains
those from an explicit stack. Nesting depth (long `a + b + ...` sums, builder
chains) is therefore bounded by memory, not by the interpreter's call stack.

A node kind missing from the tables raises `UnsupportedConstruct` rather than
being skipped.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from tree_sitter import Node, Tree

from unsafe_density.analysis import node_kinds as kinds
from unsafe_density.config import RuntimeConfig
from unsafe_density.core.errors import UnsupportedConstruct
from unsafe_density.core.report import FunctionReport
from unsafe_density.core.summary import EMPTY, Summary

logger = logging.getLogger(__name__)

ITEM = "item"
STATEMENT = "statement"
EXPRESSION = "expression"

# A pending visit: (category, node, ambient flag).
Task = Tuple[str, Node, bool]
# A node's own contribution and the children it still needs classified.
Expansion = Tuple[Summary, List[Task]]
Rule = Callable[[Node, bool], Expansion]


def _named(node: Node) -> List[Node]:
  """Named children, minus comments and other extras."""
  return [child for child in node.named_children if not child.is_extra]


def _operands(node: Node) -> List[Node]:
  """Named children that are sub-expressions rather than syntax."""
  return [child for child in _named(node) if child.type not in kinds.NON_OPERANDS]


def _location(node: Node):
  return node.start_point[0] + 1, node.start_point[1] + 1


def _unsupported(node: Node, category: str) -> UnsupportedConstruct:
  line, column = _location(node)
  return UnsupportedConstruct(node.type, category, line=line, column=column)


def _items(container: Node, ambient: bool) -> List[Task]:
  return [(ITEM, child, ambient) for child in _named(container)]


def _statements(block: Node, ambient: bool) -> List[Task]:
  return [(STATEMENT, child, ambient) for child in _named(block)]


def _expressions(nodes: Iterable[Optional[Node]], ambient: bool) -> List[Task]:
  return [(EXPRESSION, node, ambient) for node in nodes if node is not None]


def is_unsafe_function(node: Node) -> bool:
  """
  Checks whether a `function_item` carries the `unsafe` modifier.

  Args:
      node (Node): A `function_item` node.

  Returns:
      bool: True for `unsafe fn` (including `pub unsafe extern "C" fn`).
  """
  for child in node.named_children:
    if child.type == "function_modifiers":
      return any(modifier.type == "unsafe" for modifier in child.children)
  return False


class UnsafetyClassifier:
  """
  Classifies a Rust syntax tree into a `Summary` of safe and unsafe leaves.

  The classifier holds configuration only; every method is a pure function of
  its node and ambient flag, so a single instance may be reused across trees.

  Attributes:
      config (RuntimeConfig): Settings (module descent).
  """

  def __init__(self, config: Optional[RuntimeConfig] = None):
    self.config = config or RuntimeConfig()

    self._item_rules: Dict[str, Rule] = {
      "function_item": self._function,
      "mod_item": self._module,
      "macro_invocation": self._opaque_leaf,
    }
    self._item_rules.update({kind: self._inert for kind in kinds.INERT_ITEMS})
    self._item_rules.update({kind: self._group for kind in kinds.GROUPING_ITEMS})
    self._item_rules.update({kind: self._item_value for kind in kinds.VALUE_ITEMS})

    self._statement_rules: Dict[str, Rule] = {
      "expression_statement": self._expression_statement,
      "let_declaration": self._let,
      "label": self._inert,
    }

    self._expression_rules: Dict[str, Rule] = {
      "call_expression": self._call,
      "unsafe_block": self._unsafe_block,
      "macro_invocation": self._opaque_leaf,
      "reference_expression": self._leaf_over_value,
      "type_cast_expression": self._leaf_over_value,
      "field_expression": self._leaf_over_value,
      "closure_expression": self._closure,
      "struct_expression": self._struct,
      "match_arm": self._match_arm,
    }
    self._expression_rules.update({kind: self._opaque_leaf for kind in kinds.ATOMS})
    self._expression_rules.update({kind: self._operator for kind in kinds.OPERATORS})
    self._expression_rules.update({kind: self._block for kind in kinds.BLOCK_LIKE})
    self._expression_rules.update({kind: self._control_fields for kind in kinds.CONTROL_FLOW_FIELDS})
    self._expression_rules.update({kind: self._control_wrapper for kind in kinds.CONTROL_FLOW_WRAPPERS})

  # --- Entry Points ---

  def classify_tree(self, tree: Tree) -> Summary:
    """
    Classifies a whole source file.

    Args:
        tree (Tree): A parsed Rust syntax tree.

    Returns:
        Summary: Fold of every top-level item classified with the flag off.

    Raises:
        UnsupportedConstruct: If any node has no classification rule.
    """
    summary = self._walk(_items(tree.root_node, False))
    logger.debug(f"Classified tree: safe={summary.safe_count} unsafe={summary.unsafe_count}")
    return summary

  def process_item(self, node: Node, ambient: bool) -> Summary:
    """
    Classifies a declaration.

    Args:
        node (Node): Item node (`function_item`, `mod_item`, ...).
        ambient (bool): True if lexically inside an unsafe scope.

    Returns:
        Summary: The item's contribution.

    Raises:
        UnsupportedConstruct: If the item kind has no rule.
    """
    return self._walk([(ITEM, node, ambient)])

  def process_stmt(self, node: Node, ambient: bool) -> Summary:
    """
    Classifies a statement inside a block.

    Tail expressions (a block's final expression without a semicolon) are
    accepted here and routed to expression dispatch.

    Args:
        node (Node): Statement node.
        ambient (bool): True if lexically inside an unsafe scope.

    Returns:
        Summary: The statement's contribution.

    Raises:
        UnsupportedConstruct: If the statement kind has no rule.
    """
    return self._walk([(STATEMENT, node, ambient)])

  def process_expression(self, node: Node, ambient: bool) -> Summary:
    """
    Classifies an expression.

    Args:
        node (Node): Expression node.
        ambient (bool): True if lexically inside an unsafe scope.

    Returns:
        Summary: The expression's contribution.

    Raises:
        UnsupportedConstruct: If the expression kind has no rule.
    """
    return self._walk([(EXPRESSION, node, ambient)])

  def function_reports(self, tree: Tree) -> List[FunctionReport]:
    """
    Classifies every function in the tree on its own.

    Each function is classified with the ambient flag it inherits from its
    lexical ancestors, so a helper nested in an `unsafe fn` is still unsafe.
    Summaries are inclusive: a nested function also counts toward its parent.
    Functions inside inline `mod { }` bodies are listed only when modules are
    descended into, matching what the file total counts.

    Args:
        tree (Tree): A parsed Rust syntax tree.

    Returns:
        List[FunctionReport]: One entry per counted `function_item`, in source order.
    """
    reports = []
    for node in self._iter_functions(tree.root_node):
      name_node = node.child_by_field_name("name")
      line, _ = _location(node)
      reports.append(
        FunctionReport(
          name=name_node.text.decode("utf-8") if name_node is not None else "<anonymous>",
          line=line,
          declared_unsafe=is_unsafe_function(node),
          summary=self.process_item(node, self._inherited_unsafety(node)),
        )
      )
    return reports

  @classmethod
  def supported_kinds(cls) -> Dict[str, List[str]]:
    """
    Lists the node kinds covered by each dispatch table.

    Returns:
        Dict[str, List[str]]: Sorted kinds keyed by category.
    """
    probe = cls()
    statement = set(probe._statement_rules) | set(probe._item_rules) | set(probe._expression_rules)
    return {
      ITEM: sorted(probe._item_rules),
      STATEMENT: sorted(statement),
      EXPRESSION: sorted(probe._expression_rules),
    }

  # --- Traversal ---

  def _walk(self, tasks: List[Task]) -> Summary:
    """
    Drains a work stack of pending visits and folds their contributions.

    Children are pushed in reverse so nodes are visited in source order and
    the first unsupported construct reported is the earliest one in the file.

    Args:
        tasks (List[Task]): Initial visits, in source order.

    Returns:
        Summary: Fold of every visited node's own contribution.

    Raises:
        UnsupportedConstruct: If a visited node has no rule for its category.
    """
    summary = EMPTY
    stack = list(reversed(tasks))
    while stack:
      category, node, ambient = stack.pop()
      own, pending = self._expand(category, node, ambient)
      summary = summary + own
      stack.extend(reversed(pending))
    return summary

  def _expand(self, category: str, node: Node, ambient: bool) -> Expansion:
    if category == EXPRESSION:
      rule = self._expression_rules.get(node.type)
      if rule is None:
        raise _unsupported(node, EXPRESSION)
      return rule(node, ambient)

    if category == STATEMENT:
      rule = self._statement_rules.get(node.type)
      if rule is not None:
        return rule(node, ambient)
      if node.type in self._item_rules:
        return self._expand(ITEM, node, ambient)
      if node.type in self._expression_rules:
        return self._expand(EXPRESSION, node, ambient)
      raise _unsupported(node, STATEMENT)

    rule = self._item_rules.get(node.type)
    if rule is not None:
      return rule(node, ambient)

    # tree-sitter may surface `foo!(...);` at item level as an expression statement.
    if node.type == "expression_statement":
      inner = _named(node)
      if len(inner) == 1 and inner[0].type == "macro_invocation":
        return self._opaque_leaf(inner[0], ambient)

    raise _unsupported(node, ITEM)

  def _iter_functions(self, root: Node):
    stack = [root]
    while stack:
      node = stack.pop()
      if node.type == "function_item":
        yield node
      if node.type == "mod_item" and not self.config.descend_modules:
        continue
      stack.extend(reversed(_named(node)))

  @staticmethod
  def _inherited_unsafety(node: Node) -> bool:
    parent = node.parent
    while parent is not None:
      if parent.type == "unsafe_block":
        return True
      if parent.type == "function_item" and is_unsafe_function(parent):
        return True
      parent = parent.parent
    return False

  # --- Item Rules ---

  def _function(self, node: Node, ambient: bool) -> Expansion:
    inner = ambient or is_unsafe_function(node)
    body = node.child_by_field_name("body")
    return Summary.leaf(inner), _statements(body, inner) if body is not None else []

  def _module(self, node: Node, ambient: bool) -> Expansion:
    body = node.child_by_field_name("body")
    if self.config.descend_modules and body is not None:
      return Summary.leaf(ambient), _items(body, ambient)
    return Summary.leaf(ambient), []

  def _group(self, node: Node, ambient: bool) -> Expansion:
    body = node.child_by_field_name("body")
    return EMPTY, _items(body, ambient) if body is not None else []

  def _item_value(self, node: Node, ambient: bool) -> Expansion:
    return EMPTY, _expressions([node.child_by_field_name("value")], ambient)

  def _inert(self, node: Node, ambient: bool) -> Expansion:
    return EMPTY, []

  def _opaque_leaf(self, node: Node, ambient: bool) -> Expansion:
    return Summary.leaf(ambient), []

  # --- Statement Rules ---

  def _expression_statement(self, node: Node, ambient: bool) -> Expansion:
    return EMPTY, _expressions(_named(node), ambient)

  def _let(self, node: Node, ambient: bool) -> Expansion:
    return EMPTY, _expressions(
      [node.child_by_field_name("value"), node.child_by_field_name("alternative")],
      ambient,
    )

  # --- Expression Rules ---

  def _call(self, node: Node, ambient: bool) -> Expansion:
    pending: List[Task] = []

    callee = node.child_by_field_name("function")
    if callee is not None and callee.type == "generic_function":
      callee = callee.child_by_field_name("function")
    if callee is not None and callee.type not in kinds.PATH_CALLEES:
      if callee.type == "field_expression":
        # Method call: the receiver is evaluated like an argument.
        pending.extend(_expressions([callee.child_by_field_name("value")], ambient))
      else:
        pending.extend(_expressions([callee], ambient))

    arguments = node.child_by_field_name("arguments")
    if arguments is not None:
      pending.extend(_expressions(_operands(arguments), ambient))
    return Summary.leaf(ambient), pending

  def _unsafe_block(self, node: Node, ambient: bool) -> Expansion:
    pending: List[Task] = []
    for child in _named(node):
      if child.type == "block":
        pending.extend(_statements(child, True))
    return EMPTY, pending

  def _block(self, node: Node, ambient: bool) -> Expansion:
    if node.type == "block":
      return EMPTY, _statements(node, ambient)
    return EMPTY, _expressions([child for child in _named(node) if child.type == "block"], ambient)

  def _operator(self, node: Node, ambient: bool) -> Expansion:
    return Summary.leaf(ambient), _expressions(_operands(node), ambient)

  def _leaf_over_value(self, node: Node, ambient: bool) -> Expansion:
    return Summary.leaf(ambient), _expressions([node.child_by_field_name("value")], ambient)

  def _closure(self, node: Node, ambient: bool) -> Expansion:
    return Summary.leaf(ambient), _expressions([node.child_by_field_name("body")], ambient)

  def _struct(self, node: Node, ambient: bool) -> Expansion:
    body = node.child_by_field_name("body")
    if body is None:
      return Summary.leaf(ambient), []

    pending: List[Task] = []
    for initializer in _named(body):
      if initializer.type == "field_initializer":
        pending.extend(_expressions([initializer.child_by_field_name("value")], ambient))
      elif initializer.type in ("shorthand_field_initializer", "base_field_initializer"):
        pending.extend(_expressions(_operands(initializer), ambient))
      elif initializer.type != "attribute_item":
        raise _unsupported(initializer, EXPRESSION)
    return Summary.leaf(ambient), pending

  def _control_fields(self, node: Node, ambient: bool) -> Expansion:
    fields = kinds.CONTROL_FLOW_FIELDS[node.type]
    return EMPTY, _expressions([node.child_by_field_name(name) for name in fields], ambient)

  def _control_wrapper(self, node: Node, ambient: bool) -> Expansion:
    return EMPTY, _expressions(_operands(node), ambient)

  def _match_arm(self, node: Node, ambient: bool) -> Expansion:
    pattern = node.child_by_field_name("pattern")
    guard = pattern.child_by_field_name("condition") if pattern is not None else None
    return EMPTY, _expressions([guard, node.child_by_field_name("value")], ambient)


def classify_tree(tree: Tree, config: Optional[RuntimeConfig] = None) -> Summary:
  """
  Classifies a parsed tree with a fresh classifier.

  Args:
      tree (Tree): A parsed Rust syntax tree.
      config (RuntimeConfig, optional): Classifier settings.

  Returns:
      Summary: Safe and unsafe leaf counts for the whole tree.

  Raises:
      UnsupportedConstruct: If any node has no classification rule.
  """
  return UnsafetyClassifier(config).classify_tree(tree)

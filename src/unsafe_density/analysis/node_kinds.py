"""
Tree-sitter Rust node kinds grouped by how the classifier treats them.

The grammar reference is ``tree-sitter-rust``'s ``grammar.js``. Every kind the
classifier accepts appears in exactly one table below; anything else is an
unsupported construct.
"""

from typing import Dict, FrozenSet, Tuple

# Declarations that carry no executable code.
INERT_ITEMS: FrozenSet[str] = frozenset(
  {
    "use_declaration",
    "extern_crate_declaration",
    "struct_item",
    "enum_item",
    "union_item",
    "type_item",
    "associated_type",
    "function_signature_item",
    "macro_definition",
    "attribute_item",
    "inner_attribute_item",
    "empty_statement",
    "shebang",
  }
)

# Declarations whose members are classified under the unchanged flag.
GROUPING_ITEMS: FrozenSet[str] = frozenset({"impl_item", "trait_item", "foreign_mod_item"})

# Declarations whose initializer expression is classified.
VALUE_ITEMS: FrozenSet[str] = frozenset({"const_item", "static_item"})

LITERALS: FrozenSet[str] = frozenset(
  {
    "string_literal",
    "raw_string_literal",
    "char_literal",
    "boolean_literal",
    "integer_literal",
    "float_literal",
  }
)

# Value expressions that have no sub-expressions worth visiting.
ATOMS: FrozenSet[str] = LITERALS | frozenset(
  {
    "identifier",
    "self",
    "scoped_identifier",
    "generic_function",
    "metavariable",
    "unit_expression",
  }
)

# Value expressions: one leaf plus every named child that is an operand.
OPERATORS: FrozenSet[str] = frozenset(
  {
    "unary_expression",
    "binary_expression",
    "assignment_expression",
    "compound_assignment_expr",
    "try_expression",
    "await_expression",
    "index_expression",
    "range_expression",
    "return_expression",
    "break_expression",
    "continue_expression",
    "yield_expression",
    "tuple_expression",
    "array_expression",
  }
)

# Block-shaped expressions whose statements are folded without a leaf.
BLOCK_LIKE: FrozenSet[str] = frozenset({"block", "async_block", "gen_block", "try_block", "const_block"})

# Control flow with named fields: only these fields are visited, so binding
# patterns (`for x in ..`, `if let Some(x) = ..`) are never counted.
CONTROL_FLOW_FIELDS: Dict[str, Tuple[str, ...]] = {
  "if_expression": ("condition", "consequence", "alternative"),
  "while_expression": ("condition", "body"),
  "loop_expression": ("body",),
  "for_expression": ("value", "body"),
  "match_expression": ("value", "body"),
  "let_condition": ("value",),
}

# Control flow without pattern children: every operand is visited.
CONTROL_FLOW_WRAPPERS: FrozenSet[str] = frozenset(
  {"parenthesized_expression", "else_clause", "let_chain", "match_block"}
)

# Named children that are syntax, never operands.
NON_OPERANDS: FrozenSet[str] = frozenset(
  {
    "attribute_item",
    "label",
    "mutable_specifier",
    "field_identifier",
    "type_arguments",
    "closure_parameters",
  }
)

# Callees that only name a function and evaluate nothing.
PATH_CALLEES: FrozenSet[str] = frozenset({"identifier", "scoped_identifier", "self", "metavariable"})

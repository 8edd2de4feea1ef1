"""
Static Analysis Package.

This package contains the walker that inspects Rust syntax trees produced by
tree-sitter and counts constructs inside and outside `unsafe` scopes.

Modules:
    - ``classifier``: Recursive item/statement/expression dispatch producing a `Summary`.
    - ``node_kinds``: Node kind tables that define which constructs are covered and how.
"""

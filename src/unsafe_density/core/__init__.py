"""
Core Package.

Contains the analysis backbone:
- Summary value type and fold
- Error hierarchy
- Rust parser wrapper (tree-sitter)
- Density Engine and result reports
"""

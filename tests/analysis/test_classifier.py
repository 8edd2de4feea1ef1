"""
Tests for the Unsafety Classifier.

Verifies:
1.  The regression scenarios (hello world, unsafe block, unsafe fn, split blocks, let initializers).
2.  Ambient propagation through unsafe functions, unsafe blocks and nested items.
3.  Per-kind rules for items, statements and expressions.
4.  Unknown node kinds raise `UnsupportedConstruct` instead of being skipped.
"""

import pytest

from unsafe_density import classify_source
from unsafe_density.analysis.classifier import UnsafetyClassifier, classify_tree, is_unsafe_function
from unsafe_density.config import RuntimeConfig
from unsafe_density.core.errors import ClassificationError, UnsupportedConstruct
from unsafe_density.core.summary import Summary


def counts(code: str, **settings) -> Summary:
  return classify_source(code, RuntimeConfig(**settings))


def expect(safe: int, unsafe: int) -> Summary:
  return Summary(safe_count=safe, unsafe_count=unsafe)


class _StubNode:
  """Minimal stand-in for a tree-sitter node of an unknown kind."""

  def __init__(self, kind: str, row: int = 0, column: int = 0):
    self.type = kind
    self.start_point = (row, column)


# --- Regression Scenarios ---


def test_hello_world():
  code = """
    fn main() {
        println!("hello world!");
    }
    """
  assert counts(code) == expect(2, 0)


def test_simple_unsafe_block():
  code = """
    fn main() {
        unsafe {
            unimplemented!();
        }
    }
    """
  assert counts(code) == expect(1, 1)


def test_simple_unsafe_func():
  code = """\
unsafe fn foreign() {
    unimplemented!();
}

fn main() {

}
"""
  assert counts(code) == expect(1, 2)


def test_compare_split_unsafe_blocks():
  joined = """
fn main() {
  unsafe {
    foreign();
    foreign();
    foreign();
  }
}
"""
  split = """
fn main() {
  unsafe {
    foreign();
  }
  unsafe {
    foreign();
  }
  unsafe{
    foreign();
  }
}
"""
  assert counts(joined) == counts(split) == expect(1, 3)


@pytest.mark.parametrize("n", [1, 2, 5])
def test_split_invariance_for_any_count(n):
  joined = "fn main() { unsafe { " + " ".join("f();" for _ in range(n)) + " } }"
  split = "fn main() { " + " ".join("unsafe { f(); }" for _ in range(n)) + " }"
  assert counts(joined) == counts(split)


def test_let_initializer_inside_unsafe_block():
  code = """
fn main() {
    let x = unsafe { foreign() };
}
"""
  assert counts(code) == expect(1, 1)


# --- Ambient Propagation ---


def test_call_in_unsafe_fn_without_block_is_unsafe():
  assert counts("unsafe fn f() { g(); }") == expect(0, 2)


def test_unsafe_block_only_covers_its_statements():
  code = """
fn main() {
    unsafe { a(); }
    b();
}
"""
  assert counts(code) == expect(2, 1)


def test_unsafe_block_inside_unsafe_fn_is_not_double_counted():
  assert counts("unsafe fn f() { unsafe { g(); } }") == expect(0, 2)


def test_sibling_functions_are_independent():
  code = """
unsafe fn a() { x(); }
fn b() { y(); }
"""
  assert counts(code) == expect(2, 2)


def test_nested_fn_inherits_unsafety():
  code = """
unsafe fn outer() {
    fn inner() { x(); }
}
"""
  assert counts(code) == expect(0, 3)


def test_fn_declared_in_unsafe_block_is_unsafe():
  code = """
fn outer() {
    unsafe {
        fn inner() {}
    }
}
"""
  assert counts(code) == expect(1, 1)


def test_qualified_unsafe_fn_detected(parse_rust):
  tree = parse_rust('pub unsafe extern "C" fn cb() {}')
  fn_node = tree.root_node.named_children[0]
  assert fn_node.type == "function_item"
  assert is_unsafe_function(fn_node)


def test_extern_fn_without_unsafe_is_safe(parse_rust):
  tree = parse_rust('extern "C" fn cb() {}')
  assert not is_unsafe_function(tree.root_node.named_children[0])


# --- Expressions ---


def test_call_arguments_are_folded():
  assert counts("fn main() { foo(1, x); }") == expect(4, 0)


def test_method_call_counts_receiver():
  assert counts("fn main() { v.push(1); }") == expect(4, 0)


def test_path_callee_is_not_counted():
  assert counts("fn main() { Vec::new(); }") == expect(2, 0)


def test_turbofish_callee_is_not_counted():
  assert counts("fn main() { parse::<u8>(); }") == expect(2, 0)


def test_nested_calls_in_unsafe_block():
  assert counts("fn main() { unsafe { f(g()); } }") == expect(1, 2)


def test_macro_arguments_are_opaque():
  assert counts("fn main() { unsafe { println!(\"{}\", danger()); } }") == expect(1, 1)


def test_raw_pointer_deref_in_unsafe_fn():
  code = "unsafe fn read(p: *const u8) -> u8 { *p }"
  assert counts(code) == expect(0, 3)


def test_closure_body_is_classified():
  assert counts("fn main() { let f = |x| x + 1; }") == expect(5, 0)


def test_struct_expression_fields():
  assert counts("fn main() { let p = Point { x: 1, y }; }") == expect(4, 0)


def test_reference_and_cast():
  assert counts("fn main() { let p = &x as *const i32; }") == expect(4, 0)


def test_field_and_index_access():
  assert counts("fn main() { let v = s.items[0]; }") == expect(5, 0)


def test_tuple_and_array_literals():
  assert counts("fn main() { let t = (1, [2, 3]); }") == expect(6, 0)


def test_return_and_try():
  assert counts("fn f() -> Result<(), E> { g()?; return Ok(()); }") == expect(6, 0)


# --- Control Flow ---


def test_if_else_adds_no_leaf_of_its_own():
  code = "fn main() { if cond { a(); } else { b(); } }"
  assert counts(code) == expect(4, 0)


def test_for_loop_pattern_is_not_counted():
  code = "fn main() { for i in items { use_it(i); } }"
  assert counts(code) == expect(4, 0)


def test_while_loop():
  code = "fn main() { while n > 0 { n -= 1; } }"
  assert counts(code) == expect(7, 0)


def test_loop_with_break():
  assert counts("fn main() { loop { break; } }") == expect(2, 0)


def test_match_arms():
  code = """
fn main() {
    match x {
        Some(v) => a(v),
        _ => b(),
    }
}
"""
  assert counts(code) == expect(5, 0)


def test_if_let_binding_is_not_counted():
  code = "fn main() { if let Some(v) = opt { use_it(v); } }"
  assert counts(code) == expect(4, 0)


def test_unsafe_block_inside_loop():
  code = "fn main() { loop { unsafe { step(); } } }"
  assert counts(code) == expect(1, 1)


# --- Statements ---


def test_let_without_initializer():
  assert counts("fn main() { let x; }") == expect(1, 0)


def test_let_with_literal():
  assert counts("fn main() { let x = 5; }") == expect(2, 0)


def test_let_else_alternative_is_folded():
  code = "fn main() { let Some(x) = opt else { return; }; }"
  assert counts(code) == expect(3, 0)


def test_comments_are_ignored():
  code = """
fn main() {
    // leading
    a(); /* trailing */
}
"""
  assert counts(code) == expect(2, 0)


def test_empty_function():
  assert counts("fn main() {}") == expect(1, 0)


def test_empty_file():
  assert counts("") == expect(0, 0)


# --- Items ---


def test_inert_declarations_contribute_nothing():
  code = """
#![allow(unused_variables, dead_code)]
extern crate failure;
use std::ops::Add;
struct Point { x: i32, y: i32 }
enum Kind { A, B }
union Bits { i: u32, f: f32 }
type Alias = u32;
macro_rules! noop { () => {}; }
"""
  assert counts(code) == expect(0, 0)


def test_impl_methods_are_classified():
  code = """
struct S;
impl S {
    fn a(&self) {}
    unsafe fn b(&self) { c(); }
}
"""
  assert counts(code) == expect(1, 2)


def test_unsafe_impl_does_not_make_members_unsafe():
  code = """
struct S;
unsafe impl Send for S {}
unsafe impl Sync for S {
}
"""
  assert counts(code) == expect(0, 0)


def test_trait_default_methods_are_classified():
  code = """
trait T {
    type Out;
    fn sig(&self);
    fn def(&self) { x(); }
}
"""
  assert counts(code) == expect(2, 0)


def test_extern_block_declarations_contribute_nothing():
  code = """
extern "C" {
    fn abs(input: i32) -> i32;
    static errno: i32;
}
"""
  assert counts(code) == expect(0, 0)


def test_const_and_static_initializers():
  code = """
const N: usize = compute();
static mut COUNTER: u32 = 0;
"""
  assert counts(code) == expect(2, 0)


def test_module_is_a_single_leaf_by_default():
  code = "mod inner { fn f() { g(); } }"
  assert counts(code) == expect(1, 0)


def test_module_contents_when_descending():
  code = "mod inner { fn f() { g(); } }"
  assert counts(code, descend_modules=True) == expect(3, 0)


def test_out_of_line_module_declaration():
  assert counts("mod ext;", descend_modules=True) == expect(1, 0)


def test_module_inside_unsafe_fn_keeps_ambient():
  code = "unsafe fn f() { mod m {} }"
  assert counts(code) == expect(0, 2)


def long_sum(terms: int) -> str:
  return "fn f() -> u32 { " + " + ".join(["1"] * terms) + " }"


def test_long_left_nested_sum():
  # fn leaf + 299 binary leaves + 300 literals
  assert counts(long_sum(300)) == expect(600, 0)


def test_long_method_chain_inside_unsafe_block():
  chain = "b()" + ".with(1)" * 200
  code = "fn f() { unsafe { " + chain + "; } }"
  # 201 calls + 200 literal arguments, all under the unsafe block
  assert counts(code) == expect(1, 401)


def test_item_level_macro_invocation():
  assert counts("my_macro!(a, b);") == expect(1, 0)


def test_attributes_on_items():
  assert counts("#[inline]\nfn f() {}") == expect(1, 0)


# --- Unsupported Constructs ---


def test_unknown_expression_kind_raises():
  classifier = UnsafetyClassifier()
  with pytest.raises(UnsupportedConstruct) as excinfo:
    classifier.process_expression(_StubNode("mystery_expression", row=4, column=2), False)
  err = excinfo.value
  assert err.kind == "mystery_expression"
  assert err.category == "expression"
  assert (err.line, err.column) == (5, 3)
  assert "mystery_expression" in str(err)
  assert isinstance(err, ClassificationError)


def test_unknown_item_kind_raises():
  with pytest.raises(UnsupportedConstruct) as excinfo:
    UnsafetyClassifier().process_item(_StubNode("future_item"), False)
  assert excinfo.value.category == "item"


def test_unknown_statement_kind_raises():
  with pytest.raises(UnsupportedConstruct) as excinfo:
    UnsafetyClassifier().process_stmt(_StubNode("future_statement"), False)
  assert excinfo.value.category == "statement"


def test_declaration_in_expression_position_raises(parse_rust):
  tree = parse_rust("struct S;")
  struct_node = tree.root_node.named_children[0]
  with pytest.raises(UnsupportedConstruct) as excinfo:
    UnsafetyClassifier().process_expression(struct_node, False)
  assert excinfo.value.kind == "struct_item"
  assert excinfo.value.line == 1


def test_missing_rule_fails_whole_tree(parse_rust):
  classifier = UnsafetyClassifier()
  del classifier._expression_rules["binary_expression"]
  tree = parse_rust("fn main() {\n    let x = 1 + 2;\n}\n")
  with pytest.raises(UnsupportedConstruct) as excinfo:
    classifier.classify_tree(tree)
  assert excinfo.value.kind == "binary_expression"
  assert excinfo.value.line == 2


# --- Entry Points ---


def test_classify_tree_function(parse_rust):
  tree = parse_rust("fn main() { unsafe { f(); } }")
  assert classify_tree(tree) == expect(1, 1)


def test_classification_is_deterministic(parse_rust):
  tree = parse_rust("fn main() { unsafe { f(); } g(); }")
  classifier = UnsafetyClassifier()
  assert classifier.classify_tree(tree) == classifier.classify_tree(tree)


def test_supported_kinds_lists_categories():
  coverage = UnsafetyClassifier.supported_kinds()
  assert set(coverage) == {"item", "statement", "expression"}
  assert "function_item" in coverage["item"]
  assert "let_declaration" in coverage["statement"]
  assert "call_expression" in coverage["expression"]
  assert "unsafe_block" in coverage["expression"]
  assert coverage["expression"] == sorted(coverage["expression"])

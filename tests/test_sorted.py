"""
Tests for the sorted-order checks.

These tests verify that:
- #[sorted] enums must declare variants in order
- #[sorted::check] functions check their #[sorted] match expressions
- Wildcards must come last and unsupported patterns are rejected
- Every problem is reported, not just the first
"""

from seqc.diagnostics import find_compile_errors
from seqc.macros.sorted import (
    arm_path, check_attr, check_order, enum_variants, match_arms, sorted_attr,
)
from seqc.parser.token_tree import Span
from .conftest import toks


def messages(output):
    return [d.message for d in find_compile_errors(output)]


class TestSortedEnum:
    """Tests for #[sorted] on enums."""

    def test_sorted_enum_passes_through(self):
        item = toks("pub enum Error { Fmt(std::fmt::Error), Io(std::io::Error), Utf8 { pos: usize } }")
        assert sorted_attr(item) == item

    def test_first_greater_name_is_reported(self):
        item = toks("enum Error { ThatFailed, ThisFailed, SomethingFailed, WhoKnowsWhatFailed }")
        output = sorted_attr(item)
        assert output[:len(item)] == item
        assert messages(output) == ["SomethingFailed should sort before ThatFailed"]

    def test_error_points_at_variant(self):
        output = sorted_attr(toks("enum E {\n    B,\n    A,\n}"))
        assert find_compile_errors(output)[0].span == Span(3, 5)

    def test_all_errors_reported(self):
        output = sorted_attr(toks("enum E { B, A, D, C }"))
        assert messages(output) == ["A should sort before B", "C should sort before D"]

    def test_variant_attributes_skipped(self):
        item = toks('enum E { #[doc = "first"] A, #[allow(unused)] B = 2, }')
        assert [v.text for v in enum_variants(item)] == ["A", "B"]
        assert messages(sorted_attr(item)) == []

    def test_generic_enum(self):
        item = toks("pub(crate) enum E<T> where T: Copy { A(T), B }")
        assert [v.text for v in enum_variants(item)] == ["A", "B"]

    def test_not_an_enum(self):
        output = sorted_attr(toks("struct S { a: u8 }"), Span(4, 1))
        assert messages(output) == ["expected enum or match expression"]
        assert find_compile_errors(output)[0].span == Span(4, 1)


class TestCheckOrder:
    """Tests for the ordering rule itself."""

    def test_compares_against_previous_name(self):
        names = [(n, Span(1, i)) for i, n in enumerate(["C", "A", "B"])]
        errors = check_order(names)
        assert [e.message for e in errors] == ["A should sort before C"]
        assert errors[0].span == Span(1, 1)

    def test_sorted_names(self):
        assert check_order([("a", Span()), ("b", Span()), ("b", Span())]) == []


class TestSortedMatch:
    """Tests for #[sorted::check] on functions."""

    def test_sorted_attribute_removed(self):
        item = toks("fn f(e: E) { #[sorted] match e { E::A => 1, E::B => 2, } }")
        expected = toks("fn f(e: E) { match e { E::A => 1, E::B => 2, } }")
        assert check_attr(item) == expected

    def test_unsorted_paths(self):
        item = toks("""
            fn f(e: Error) -> u8 {
                #[sorted]
                match e {
                    Error::Io(x) => 1,
                    Error::Fmt(y) => 2,
                    _ => 3,
                }
            }
        """)
        output = check_attr(item)
        assert messages(output) == ["Error::Fmt should sort before Error::Io"]
        assert find_compile_errors(output)[0].span == Span(6, 21)

    def test_unattributed_match_not_checked(self):
        item = toks("fn f() { match x { B => 1, A => 2 } }")
        assert check_attr(item) == item

    def test_wildcard_must_be_last(self):
        item = toks("fn f() { #[sorted] match x { A => 1, _ => 2, B => 3 } }")
        assert messages(check_attr(item)) == ["wildcard must be last arm"]

    def test_unsupported_patterns(self):
        item = toks("fn f() { #[sorted] match x { A => 1, 0 => 2, B | C => 3 } }")
        assert messages(check_attr(item)) == [
            "unsupported by #[sorted]", "unsupported by #[sorted]",
        ]

    def test_every_problem_reported(self):
        item = toks("fn f() { #[sorted] match x { C => 1, A => 2, _ => 3, B => 4, 5 => 6 } }")
        assert messages(check_attr(item)) == [
            "A should sort before C",
            "wildcard must be last arm",
            "wildcard must be last arm",
            "unsupported by #[sorted]",
        ]

    def test_nested_sorted_match(self):
        item = toks("""
            fn f() {
                #[sorted]
                match x {
                    A => #[sorted] match y { Z => 1, Y => 2 },
                    B => {}
                }
            }
        """)
        assert messages(check_attr(item)) == ["Y should sort before Z"]

    def test_not_a_function(self):
        output = check_attr(toks("struct S;"), Span(2, 2))
        assert messages(output) == ["expected `fn`"]


class TestArms:
    """Tests for splitting and classifying match arms."""

    def test_block_bodies_without_commas(self):
        arms = match_arms(toks("A => {} B(x) if x > 1 => { x } _ => 0"))
        assert arms == [toks("A"), toks("B(x) if x > 1"), toks("_")]

    def test_arm_paths(self):
        assert arm_path(toks("A")) == "A"
        assert arm_path(toks("a::b::C")) == "a::b::C"
        assert arm_path(toks("::std::C(x, y)")) == "std::C"
        assert arm_path(toks("S { a, .. }")) == "S"
        assert arm_path(toks("_")) is None
        assert arm_path(toks("0")) is None
        assert arm_path(toks("A | B")) is None
        assert arm_path(toks("&A")) is None

    def test_binding_paths(self):
        """Test identifier bindings sort by the bound name."""
        assert arm_path(toks("ref b")) == "b"
        assert arm_path(toks("mut b")) == "b"
        assert arm_path(toks("ref mut b")) == "b"
        assert arm_path(toks("b @ Some(..)")) == "b"
        assert arm_path(toks("ref b @ 1..=5")) == "b"
        assert arm_path(toks("ref a::b")) is None
        assert arm_path(toks("ref b(x)")) is None
        assert arm_path(toks("_ @ x")) is None

    def test_binding_arms_checked(self):
        item = toks("fn f() { #[sorted] match x { A => 1, ref b => 2, c @ C(..) => 3, } }")
        assert messages(check_attr(item)) == []

        item = toks("fn f() { #[sorted] match x { mut c => 1, ref b => 2 } }")
        assert messages(check_attr(item)) == ["b should sort before c"]

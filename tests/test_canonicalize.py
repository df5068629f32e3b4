"""Tests for canonical ordering of value trees."""

import pytest
from pydantic import ValidationError

from jsonsrt.kernel.canonicalize import KeyOrder, SortConfig, canonicalize, is_canonical
from jsonsrt.kernel.parser import parse
from jsonsrt.kernel.serializer import COMPACT, serialize_to_str
from jsonsrt.kernel.value import Array, Null, Number, Object, String, from_python

PRIVATE_USE = chr(0xE000)


def _compact(text: str, config: SortConfig = None) -> str:
    return serialize_to_str(canonicalize(parse(text), config), COMPACT)


class TestKeySorting:
    """Object members are sorted by key, recursively and stably."""

    def test_top_level_keys_sorted(self):
        assert _compact('{"b":2,"a":1,"c":3}') == '{"a":1,"b":2,"c":3}'

    def test_nested_keys_sorted(self):
        assert _compact('{"z":{"b":2,"a":1},"a":{"d":4,"c":3}}') == '{"a":{"c":3,"d":4},"z":{"a":1,"b":2}}'

    def test_objects_inside_arrays_sorted(self):
        assert _compact('[{"b":1,"a":2},[{"d":1,"c":2}]]') == '[{"a":2,"b":1},[{"c":2,"d":1}]]'

    def test_duplicate_keys_keep_relative_order(self):
        tree = canonicalize(parse('{"b":0,"a":1,"a":2,"a":3}'))
        assert tree == Object((
            ("a", Number("1")),
            ("a", Number("2")),
            ("a", Number("3")),
            ("b", Number("0")),
        ))

    def test_ordinal_not_locale_order(self):
        # Uppercase sorts before lowercase; no case folding
        assert _compact('{"b":1,"B":2,"a":3,"A":4}') == '{"A":4,"B":2,"a":3,"b":1}'

    def test_digit_keys_sorted_as_text(self):
        assert _compact('{"10":0,"9":0,"1":0}') == '{"1":0,"10":0,"9":0}'

    def test_empty_key_sorts_first(self):
        assert _compact('{"a":1,"":2}') == '{"":2,"a":1}'

    def test_keys_compared_after_decoding(self):
        # \u0062 decodes to "b"
        assert _compact('{"\\u0062":1,"a":2}') == '{"a":2,"b":1}'

    def test_codepoint_vs_utf16_order(self):
        text = '{"\\ue000":1,"\\ud83d\\ude00":2}'
        by_codepoint = canonicalize(parse(text))
        by_utf16 = canonicalize(parse(text), SortConfig(key_order=KeyOrder.UTF16))
        assert by_codepoint.keys() == [PRIVATE_USE, "\U0001F600"]
        assert by_utf16.keys() == ["\U0001F600", PRIVATE_USE]

    def test_sort_keys_disabled_keeps_input_order(self):
        assert _compact('{"b":1,"a":{"d":1,"c":2}}', SortConfig(sort_keys=False)) == '{"b":1,"a":{"d":1,"c":2}}'


class TestArraysAndScalars:
    """Arrays keep their order; scalars pass through."""

    def test_array_order_preserved(self):
        assert _compact("[3,1,2]") == "[3,1,2]"

    def test_nested_array_order_preserved(self):
        assert _compact('[[3,1],{"a":[2,1]}]') == '[[3,1],{"a":[2,1]}]'

    def test_scalars_unchanged(self):
        for node in (Null(), Number("1.50"), String("x")):
            assert canonicalize(node) is node

    def test_number_text_untouched(self):
        assert _compact('{"y":1e10,"x":1.50}') == '{"x":1.50,"y":1e10}'

    def test_input_tree_not_modified(self):
        tree = parse('{"b":1,"a":2}')
        canonicalize(tree)
        assert tree.keys() == ["b", "a"]

    def test_deep_tree_canonicalized_without_recursion(self):
        data = {"b": 1, "a": 2}
        for _ in range(5000):
            data = {"z": [data], "a": 0}
        tree = canonicalize(from_python(data))
        assert tree.keys() == ["a", "z"]
        while "z" in tree.keys():
            tree = tree.get("z").items[0]
        assert tree.keys() == ["a", "b"]

    def test_rejects_foreign_objects(self):
        with pytest.raises(TypeError):
            canonicalize(Array(({"a": 1},)))


class TestSortArraysByValue:
    """Opt-in reordering of arrays of objects by a member value."""

    def test_sorts_by_member_value(self):
        config = SortConfig(sort_arrays_by="x")
        assert _compact('[{"x":1},{"x":0}]', config) == '[{"x":0},{"x":1}]'

    def test_numbers_compared_by_value(self):
        config = SortConfig(sort_arrays_by="n")
        assert _compact('[{"n":10},{"n":9.5},{"n":1e0}]', config) == '[{"n":1e0},{"n":9.5},{"n":10}]'

    def test_huge_exponents_compared_exactly(self):
        config = SortConfig(sort_arrays_by="k")
        text = '[{"k":1e99999999999999999999},{"k":1},{"k":-1e99999999999999999999},{"k":1e-99999999999999999999},{"k":-0}]'
        result = _compact(text, config)
        assert result == (
            '[{"k":-1e99999999999999999999},{"k":-0},{"k":1e-99999999999999999999},'
            '{"k":1},{"k":1e99999999999999999999}]'
        )

    def test_negative_numbers_ordered(self):
        config = SortConfig(sort_arrays_by="n")
        result = _compact('[{"n":-0.12},{"n":0.5},{"n":-0.123},{"n":-2},{"n":-19}]', config)
        assert result == '[{"n":-19},{"n":-2},{"n":-0.123},{"n":-0.12},{"n":0.5}]'

    def test_equal_numbers_with_different_spelling_are_stable(self):
        config = SortConfig(sort_arrays_by="n")
        result = _compact('[{"n":1.0,"i":1},{"n":0},{"n":1e0,"i":2},{"n":10e-1,"i":3}]', config)
        assert result == '[{"n":0},{"i":1,"n":1.0},{"i":2,"n":1e0},{"i":3,"n":10e-1}]'

    def test_strings_compared_by_codepoint(self):
        config = SortConfig(sort_arrays_by="name")
        result = _compact('[{"name":"bob"},{"name":"Al"},{"name":"al"}]', config)
        assert result == '[{"name":"Al"},{"name":"al"},{"name":"bob"}]'

    def test_mixed_types_use_type_rank(self):
        config = SortConfig(sort_arrays_by="v")
        result = _compact('[{"v":"s"},{"v":1},{"v":null},{"v":true}]', config)
        assert result == '[{"v":null},{"v":true},{"v":1},{"v":"s"}]'

    def test_elements_without_member_keep_order_at_end(self):
        config = SortConfig(sort_arrays_by="x")
        result = _compact('[3,{"y":1},{"x":2},"a",{"x":1}]', config)
        assert result == '[{"x":1},{"x":2},3,{"y":1},"a"]'

    def test_equal_values_are_stable(self):
        config = SortConfig(sort_arrays_by="x")
        result = _compact('[{"x":1,"id":"a"},{"x":0},{"x":1,"id":"b"}]', config)
        assert result == '[{"x":0},{"id":"a","x":1},{"id":"b","x":1}]'

    def test_container_values_compared_canonically(self):
        config = SortConfig(sort_arrays_by="x")
        result = _compact('[{"x":{"b":2}},{"x":{"a":9}}]', config)
        assert result == '[{"x":{"a":9}},{"x":{"b":2}}]'

    def test_nested_arrays_sorted(self):
        config = SortConfig(sort_arrays_by="x")
        result = _compact('{"items":[{"x":2},{"x":1,"sub":[{"x":"b"},{"x":"a"}]}]}', config)
        assert result == '{"items":[{"sub":[{"x":"a"},{"x":"b"}],"x":1},{"x":2}]}'

    def test_default_leaves_arrays_alone(self):
        assert _compact('[{"x":1},{"x":0}]') == '[{"x":1},{"x":0}]'


class TestIdempotence:
    """Canonicalizing a canonical tree changes nothing."""

    def test_canonicalize_twice(self, sample_tree):
        once = canonicalize(sample_tree)
        assert canonicalize(once) == once

    def test_is_canonical(self):
        assert is_canonical(parse('{"a":1,"b":[{"c":1,"d":2}]}'))
        assert not is_canonical(parse('{"b":1,"a":2}'))
        assert is_canonical(parse('{"b":1,"a":2}'), SortConfig(sort_keys=False))

    def test_is_canonical_deep_tree(self):
        depth = 5000
        tree = parse("[" * depth + "]" * depth, max_depth=2 * depth)
        assert is_canonical(tree)

    def test_is_canonical_deep_unsorted_leaf(self):
        depth = 5000
        tree = parse("[" * depth + '{"b":1,"a":2}' + "]" * depth, max_depth=2 * depth)
        assert not is_canonical(tree)


class TestSortConfig:
    """SortConfig validation and presets."""

    def test_defaults(self):
        config = SortConfig()
        assert config.sort_keys is True
        assert config.key_order == KeyOrder.CODEPOINT
        assert config.sort_arrays_by is None

    def test_rfc8785_preset(self):
        assert SortConfig.rfc8785().key_order == KeyOrder.UTF16

    def test_accepts_enum_values_as_strings(self):
        assert SortConfig(key_order="utf16").key_order == KeyOrder.UTF16

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            SortConfig(sort_values=True)

    def test_rejects_unknown_key_order(self):
        with pytest.raises(ValidationError):
            SortConfig(key_order="locale")

    def test_frozen_and_hashable(self):
        config = SortConfig()
        with pytest.raises(ValidationError):
            config.sort_keys = False
        assert hash(config) == hash(SortConfig())

import pytest

from tzkit.errors import EncodingError
from tzkit.utils.michelson import arity_of, encode_args, encode_value, flatten_pair, or_branches


def T(prim, *args):
    node = {"prim": prim}
    if args:
        node["args"] = list(args)
    return node


TRANSFER = T("pair", T("address"), T("pair", T("address"), T("nat")))


def test_pairs_flatten_for_arity():
    assert [leaf["prim"] for leaf in flatten_pair(TRANSFER)] == ["address", "address", "nat"]
    assert arity_of(TRANSFER) == 3
    assert arity_of(T("unit")) == 0
    assert arity_of(T("int")) == 1


def test_positional_args_follow_pair_leaves():
    assert encode_args(TRANSFER, ["tz1a", "tz1b", 10]) == {
        "prim": "Pair",
        "args": [{"string": "tz1a"}, {"prim": "Pair", "args": [{"string": "tz1b"}, {"int": "10"}]}],
    }
    assert encode_args(T("unit"), []) == {"prim": "Unit"}
    assert encode_args(T("mutez"), [5]) == {"int": "5"}


def test_literals():
    assert encode_value(T("bool"), True) == {"prim": "True"}
    assert encode_value(T("bytes"), b"\x01\xff") == {"bytes": "01ff"}
    assert encode_value(T("bytes"), "0xcafe") == {"bytes": "cafe"}
    assert encode_value(T("option", T("int")), None) == {"prim": "None"}
    assert encode_value(T("option", T("int")), 3) == {"prim": "Some", "args": [{"int": "3"}]}
    assert encode_value(T("list", T("string")), ["a", "b"]) == [{"string": "a"}, {"string": "b"}]


def test_maps_are_sorted_by_key():
    encoded = encode_value(T("map", T("string"), T("nat")), {"b": 2, "a": 1})
    assert encoded == [
        {"prim": "Elt", "args": [{"string": "a"}, {"int": "1"}]},
        {"prim": "Elt", "args": [{"string": "b"}, {"int": "2"}]},
    ]


def test_nested_pair_value_from_two_tuple():
    t = T("pair", T("int"), T("pair", T("string"), T("bool")))
    assert encode_value(t, (1, ("x", False))) == {
        "prim": "Pair",
        "args": [{"int": "1"}, {"prim": "Pair", "args": [{"string": "x"}, {"prim": "False"}]}],
    }


@pytest.mark.parametrize(
    "t,value",
    [
        (T("int"), "x1"),
        (T("int"), True),
        (T("string"), 3),
        (T("bool"), 1),
        (T("map", T("string"), T("int")), [1]),
        (T("chest"), 1),
        (T("pair", T("int"), T("int"), ), 1),
    ],
)
def test_mismatches_raise_encoding_error(t, value):
    with pytest.raises(EncodingError):
        encode_value(t, value)


CHOICE = T("or", {"prim": "int", "annots": ["%amount"]}, T("or", T("string"), T("unit")))


def test_or_branches_carry_names_and_paths():
    assert [(name, leaf["prim"], path) for name, leaf, path in or_branches(CHOICE)] == [
        ("amount", "int", ("Left",)),
        ("1", "string", ("Right", "Left")),
        ("2", "unit", ("Right", "Right")),
    ]


def test_or_values_pick_a_branch():
    assert encode_value(CHOICE, {"amount": 4}) == {"prim": "Left", "args": [{"int": "4"}]}
    assert encode_value(CHOICE, {"1": "x"}) == {"prim": "Right", "args": [{"prim": "Left", "args": [{"string": "x"}]}]}
    assert encode_value(T("option", CHOICE), {"2": None}) == {
        "prim": "Some",
        "args": [{"prim": "Right", "args": [{"prim": "Right", "args": [{"prim": "Unit"}]}]}],
    }


@pytest.mark.parametrize("value", [4, {"amount": 1, "1": "x"}, {"missing": 1}])
def test_or_values_need_one_known_branch(value):
    with pytest.raises(EncodingError):
        encode_value(CHOICE, value)

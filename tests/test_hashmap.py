import operator

import pytest
from hypothesis import given, strategies as st

from calir.bump import Bump
from calir.hashmap import HashMap, PtrHashMap, StrHashMap


def _is_power_of_two(n):
    return n > 0 and n & (n - 1) == 0


def test_generic_put_get_roundtrip():
    m = HashMap(hash, operator.eq)
    m.put("a", 1)
    m.put("b", 2)
    assert m.get("a") == 1
    assert m.get("b") == 2
    assert len(m) == 2


def test_get_missing_returns_default():
    m = HashMap(hash, operator.eq)
    assert m.get("nope") is None
    assert m.get("nope", 42) == 42


def test_put_overwrites_existing():
    m = HashMap(hash, operator.eq)
    m.put(5, "x")
    m.put(5, "y")
    assert m.get(5) == "y"
    assert len(m) == 1


def test_remove_then_missing():
    m = HashMap(hash, operator.eq)
    m.put(1, "one")
    assert m.remove(1) is True
    assert 1 not in m
    assert len(m) == 0
    assert m.remove(1) is False


def test_colliding_hashes_survive_removal_in_middle():
    m = HashMap(lambda k: 0, operator.eq, 4)
    for i in range(5):
        m.put(i, i * 10)
    assert m.remove(2)
    assert [m.get(i) for i in (0, 1, 3, 4)] == [0, 10, 30, 40]
    m.put(7, 70)
    assert m.get(7) == 70
    assert len(m) == 5


def test_growth_keeps_entries_and_power_of_two():
    m = HashMap(hash, operator.eq, 0)
    start = m.bucket_count
    for i in range(1000):
        m.put(i, -i)
    assert m.bucket_count > start
    assert _is_power_of_two(m.bucket_count)
    assert len(m) * 4 < m.bucket_count * 3
    assert all(m.get(i) == -i for i in range(1000))


def test_initial_capacity_avoids_growth():
    m = HashMap(hash, operator.eq, 100)
    before = m.bucket_count
    for i in range(100):
        m.put(i, i)
    assert m.bucket_count == before


def test_churn_with_tombstones_stays_bounded():
    m = HashMap(hash, operator.eq, 8)
    for i in range(5000):
        m.put(i, i)
        assert m.remove(i)
    assert len(m) == 0
    assert m.bucket_count <= 64


def test_negative_capacity_rejected():
    with pytest.raises(ValueError):
        HashMap(hash, operator.eq, -1)


def test_items_and_iter_match():
    m = HashMap(hash, operator.eq)
    data = {"x": 1, "y": 2, "z": 3}
    for k, v in data.items():
        m.put(k, v)
    assert dict(m.items()) == data
    assert sorted(m) == sorted(data)


def test_ptr_map_uses_identity():
    a = [1, 2]
    b = [1, 2]
    m = PtrHashMap()
    m.put(a, "a")
    assert m.get(a) == "a"
    assert b not in m
    m.put(b, "b")
    assert len(m) == 2
    assert m.get(b) == "b"


def test_ptr_map_keys_are_same_objects():
    objs = [object() for _ in range(50)]
    m = PtrHashMap(4)
    for i, o in enumerate(objs):
        m.put(o, i)
    assert {id(k) for k in m} == {id(o) for o in objs}
    assert all(m.get(o) == i for i, o in enumerate(objs))


def test_str_map_text_and_bytes_are_same_key():
    m = StrHashMap()
    m.put("hello", 1)
    assert m.get(b"hello") == 1
    assert "hello" in m
    m.put(b"hello", 2)
    assert len(m) == 1
    assert m.get("hello") == 2


def test_str_map_copies_key():
    key = bytearray(b"abc")
    m = StrHashMap()
    m.put(key, "v")
    key[0] = ord("z")
    assert m.get(b"abc") == "v"
    assert b"zbc" not in m
    assert list(m) == [b"abc"]


def test_str_map_empty_key():
    m = StrHashMap()
    m.put("", "empty")
    assert m.get(b"") == "empty"
    assert m.remove("")
    assert len(m) == 0


def test_str_map_preallocated_key_not_copied():
    with Bump() as arena:
        view = arena.alloc_copy(b"name")
        m = StrHashMap()
        m.put_preallocated_key(view, 9)
        assert m.get("name") == 9
        (stored,) = list(m)
        assert stored is view


def test_str_map_rejects_non_string_keys():
    m = StrHashMap()
    with pytest.raises(TypeError):
        m.put(12, "x")


@given(
    st.lists(
        st.tuples(st.booleans(), st.text(max_size=4), st.integers()),
        max_size=200,
    )
)
def test_str_map_matches_dict_model(ops):
    m = StrHashMap(0)
    model = {}
    for is_put, key, value in ops:
        if is_put:
            m.put(key, value)
            model[key.encode("utf-8")] = value
        else:
            assert m.remove(key) == (key.encode("utf-8") in model)
            model.pop(key.encode("utf-8"), None)
    assert len(m) == len(model)
    assert dict(m.items()) == model
    assert _is_power_of_two(m.bucket_count)
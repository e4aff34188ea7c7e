import pytest

from pommesound.pools import FixedPool, GrowablePool


def test_fixed_pool_hands_out_distinct_objects_until_exhausted():
    pool = FixedPool(dict, 3)
    objs = [pool.alloc() for _ in range(3)]
    assert len({id(o) for o in objs}) == 3
    assert pool.in_use == 3
    with pytest.raises(IndexError):
        pool.alloc()


def test_fixed_pool_reuses_disposed_object():
    pool = FixedPool(list, 2)
    a = pool.alloc()
    pool.alloc()
    pool.dispose(a)
    assert pool.in_use == 1
    assert pool.alloc() is a
    assert pool.peak == 2


def test_fixed_pool_rejects_foreign_and_double_dispose():
    pool = FixedPool(list, 2)
    with pytest.raises(ValueError):
        pool.dispose([])
    a = pool.alloc()
    pool.dispose(a)
    with pytest.raises(ValueError):
        pool.dispose(a)


def test_growable_pool_ids_and_access():
    pool = GrowablePool(dict, 4)
    ids = [pool.alloc() for _ in range(3)]
    assert ids == [0, 1, 2]
    pool[1]["name"] = "x"
    assert pool[1] == {"name": "x"}
    assert all(pool.is_allocated(i) for i in ids)


def test_growable_pool_reuses_freed_id():
    pool = GrowablePool(dict, 4)
    for _ in range(3):
        pool.alloc()
    pool.dispose(0)
    assert not pool.is_allocated(0)
    assert pool.alloc() == 0


def test_growable_pool_compacts_trailing_slots():
    pool = GrowablePool(dict, 4)
    for _ in range(3):
        pool.alloc()
    pool.dispose(1)
    assert len(pool) == 3
    pool.dispose(2)
    assert len(pool) == 1
    assert not pool.is_allocated(2)
    assert pool.alloc() == 1


def test_growable_pool_capacity():
    pool = GrowablePool(dict, 2)
    pool.alloc()
    pool.alloc()
    assert pool.is_full()
    with pytest.raises(IndexError):
        pool.alloc()


def test_growable_pool_invalid_ids():
    pool = GrowablePool(dict, 2)
    pool.alloc()
    with pytest.raises(KeyError):
        pool[5]
    with pytest.raises(KeyError):
        pool[-1]
    with pytest.raises(ValueError):
        pool.dispose(3)
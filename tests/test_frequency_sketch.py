import hashlib

import pytest

from lfucore.frequency_sketch import FrequencySketch, sketch_capacity

ITEMS = [0x1234_5678, 0xDEAD_BEEF, 7, 0xFFFF_FFFF]


def hasher(value: int) -> int:
    data = (value & 0xFFFF_FFFF).to_bytes(4, "little")
    return int.from_bytes(hashlib.blake2b(data, digest_size=8).digest(), "little")


def make_sketch(cap: int) -> FrequencySketch:
    sketch = FrequencySketch()
    sketch.ensure_capacity(cap)
    return sketch


@pytest.mark.parametrize("item", ITEMS)
def test_increment_once(item):
    sketch = make_sketch(512)
    item_hash = hasher(item)
    sketch.increment(item_hash)
    assert sketch.frequency(item_hash) == 1


@pytest.mark.parametrize("item", ITEMS)
def test_increment_max(item):
    sketch = make_sketch(512)
    item_hash = hasher(item)
    for _ in range(20):
        sketch.increment(item_hash)
    assert sketch.frequency(item_hash) == 15


@pytest.mark.parametrize("item", ITEMS)
def test_increment_distinct(item):
    sketch = make_sketch(512)
    sketch.increment(hasher(item))
    sketch.increment(hasher(item + 1))
    assert sketch.frequency(hasher(item)) == 1
    assert sketch.frequency(hasher(item + 1)) == 1
    assert sketch.frequency(hasher(item + 2)) == 0


def test_index_of_around_zero():
    sketch = make_sketch(512)
    hashes = [2**64 - 1, 0, 1]
    indexes = {sketch.index_of(h, depth) for h in hashes for depth in range(4)}
    assert len(indexes) == 4 * len(hashes)


def test_reset():
    sketch = make_sketch(64)
    reset = False
    for i in range(1, 20 * sketch.table_len):
        sketch.increment(hasher(i))
        if sketch.size != i:
            reset = True
            break
    assert reset
    assert sketch.size <= sketch.sample_size // 2


def test_heavy_hitters():
    sketch = make_sketch(65_536)
    for i in range(100, 100_000):
        sketch.increment(hasher(i))
    for i in range(0, 10, 2):
        for _ in range(i):
            sketch.increment(hasher(i))

    popularity = [sketch.frequency(hasher(i)) for i in range(10)]
    for i, freq in enumerate(popularity):
        if i == 2:
            assert freq <= popularity[4]
        elif i == 4:
            assert freq <= popularity[6]
        elif i == 6:
            assert freq <= popularity[8]
        elif i == 8:
            continue
        else:
            assert freq <= popularity[2]


def test_empty_sketch_reports_zero_and_ignores_increments():
    sketch = FrequencySketch()
    sketch.increment(hasher(1))
    assert sketch.frequency(hasher(1)) == 0
    assert sketch.table_len == 0


@pytest.mark.parametrize(
    "cap, table_len, sample_size",
    [(0, 1, 10), (1, 1, 10), (100, 128, 1000), (512, 512, 5120), (513, 1024, 5130)],
)
def test_ensure_capacity_sizes(cap, table_len, sample_size):
    sketch = make_sketch(cap)
    assert sketch.table_len == table_len
    assert sketch.sample_size == sample_size


def test_ensure_capacity_never_shrinks():
    sketch = make_sketch(512)
    item_hash = hasher(42)
    sketch.increment(item_hash)
    sketch.ensure_capacity(64)
    assert sketch.table_len == 512
    assert sketch.frequency(item_hash) == 1


def test_ensure_capacity_growth_forgets_counts():
    sketch = make_sketch(64)
    item_hash = hasher(42)
    sketch.increment(item_hash)
    sketch.ensure_capacity(1024)
    assert sketch.table_len == 1024
    assert sketch.frequency(item_hash) == 0


def test_ensure_capacity_rejects_negative():
    with pytest.raises(ValueError):
        FrequencySketch().ensure_capacity(-1)


def test_index_within_table():
    sketch = make_sketch(256)
    for i in range(200):
        for depth in range(4):
            assert 0 <= sketch.index_of(hasher(i), depth) < 256


@pytest.mark.parametrize(
    "max_capacity, expected",
    [(0, 128), (127, 128), (128, 128), (200, 200), (2**32 - 1, 2**32 - 1), (2**40, 2**32 - 1)],
)
def test_sketch_capacity(max_capacity, expected):
    assert sketch_capacity(max_capacity) == expected


def test_sketch_capacity_rejects_negative():
    with pytest.raises(ValueError):
        sketch_capacity(-5)
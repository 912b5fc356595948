"""A 4-bit count-min sketch with periodic aging, for TinyLFU admission."""

from __future__ import annotations

from typing import List

_U64_MASK = 2**64 - 1
_U32_MAX = 2**32 - 1
_I32_MAX = 2**31 - 1

# A mixture of seeds from FNV-1a, CityHash and Murmur3.
_SEEDS = (
    0xC3A5_C85C_97CB_3127,
    0xB492_B66F_BE98_F273,
    0x9AE1_6A3B_2F90_404F,
    0xCBF2_9CE4_8422_2325,
)

_RESET_MASK = 0x7777_7777_7777_7777
_ONE_MASK = 0x1111_1111_1111_1111

# Same limit as a 64-bit build: about one billion slots.
_MAX_TABLE_CAPACITY = 2**30


def sketch_capacity(max_capacity: int) -> int:
    """Clamp a cache's max capacity into the range ``128..=2**32 - 1``."""
    if max_capacity < 0:
        raise ValueError("max_capacity must not be negative")
    return max(min(max_capacity, _U32_MAX), 128)


def _next_power_of_two(value: int) -> int:
    return 1 if value <= 1 else 1 << (value - 1).bit_length()


class FrequencySketch:
    """A probabilistic multi-set estimating how popular an element is.

    Each element's frequency is capped at 15 (four bits), and an aging step
    halves every counter once enough increments have been observed, so that
    old popularity fades away. Elements are identified by a 64-bit hash.
    """

    def __init__(self) -> None:
        self._sample_size = 0
        self._table_mask = 0
        self._table: List[int] = []
        self._size = 0

    @property
    def size(self) -> int:
        """Number of increments counted since the last aging step."""
        return self._size

    @property
    def sample_size(self) -> int:
        """Number of increments that triggers an aging step."""
        return self._sample_size

    @property
    def table_len(self) -> int:
        """Number of 64-bit slots in the counter table."""
        return len(self._table)

    def ensure_capacity(self, cap: int) -> None:
        """Grow the table to suit a cache of ``cap`` entries.

        Growing forgets all previous counts; a table that is already large
        enough is left untouched.
        """
        if cap < 0 or cap > _U32_MAX:
            raise ValueError("cap must be within 0..=2**32 - 1")
        maximum = min(cap, _MAX_TABLE_CAPACITY)
        table_size = 1 if maximum == 0 else _next_power_of_two(maximum)

        if len(self._table) >= table_size:
            return

        self._table = [0] * table_size
        self._table_mask = table_size - 1
        self._size = 0
        if cap == 0:
            self._sample_size = 10
        else:
            self._sample_size = min(maximum * 10, _U32_MAX, _I32_MAX)

    def frequency(self, hash_value: int) -> int:
        """Return the estimated count of the hashed element, at most 15."""
        if not self._table:
            return 0
        hash_value &= _U64_MASK
        start = (hash_value & 3) << 2
        return min(
            (self._table[self.index_of(hash_value, depth)] >> ((start + depth) << 2))
            & 0xF
            for depth in range(4)
        )

    def increment(self, hash_value: int) -> None:
        """Count one more occurrence of the hashed element, aging when due."""
        if not self._table:
            return
        hash_value &= _U64_MASK
        start = (hash_value & 3) << 2
        added = False
        for depth in range(4):
            index = self.index_of(hash_value, depth)
            added |= self._increment_at(index, start + depth)

        if added:
            self._size += 1
            if self._size >= self._sample_size:
                self._reset()

    def index_of(self, hash_value: int, depth: int) -> int:
        """Return the table slot holding the counter at ``depth`` (0 to 3)."""
        seed = _SEEDS[depth]
        mixed = (((hash_value + seed) & _U64_MASK) * seed) & _U64_MASK
        mixed = (mixed + (mixed >> 32)) & _U64_MASK
        return mixed & self._table_mask

    def _increment_at(self, table_index: int, counter_index: int) -> bool:
        offset = counter_index << 2
        mask = 0xF << offset
        if self._table[table_index] & mask != mask:
            self._table[table_index] += 1 << offset
            return True
        return False

    def _reset(self) -> None:
        odd_counters = 0
        for index, entry in enumerate(self._table):
            odd_counters += (entry & _ONE_MASK).bit_count()
            self._table[index] = (entry >> 1) & _RESET_MASK
        self._size = max((self._size >> 1) - (odd_counters >> 2), 0)
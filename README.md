# lfucore

Core building blocks for in-memory caches that admit entries with a TinyLFU
policy and keep them in LRU order. Pure Python, no runtime dependencies.

## What is inside

- `lfucore.frequency_sketch`
  - `FrequencySketch`: a 4-bit count-min sketch with periodic aging. Counters
    cap at 15; once enough increments have been counted, every counter is
    halved. Elements are identified by a 64-bit hash (larger or negative
    integers are masked to 64 bits). Methods: `ensure_capacity(cap)`,
    `frequency(hash_value)`, `increment(hash_value)`, `index_of(hash_value,
    depth)`; read-only properties `size`, `sample_size` and `table_len`.
  - `sketch_capacity(max_capacity)`: clamps a capacity into `128..=2**32 - 1`.
- `lfucore.node`
  - `CacheRegion`: `WINDOW`, `MAIN_PROBATION`, `MAIN_PROTECTED`, `WRITE_ORDER`.
  - `DeqNode`: an element with its `region` and links; `next_node()` returns
    the following node. Nodes compare by identity.
- `lfucore.deque`
  - `Deque`: a doubly linked list of `DeqNode`s of one region with O(1)
    `push_back`, `pop_front`, `move_to_back`, `unlink` and `unlink_and_drop`,
    plus `peek_front`, `peek_back`, `contains`, `is_head`, `is_tail`, `clear`
    and `len()`. Iterating it yields elements front to back; the position is
    kept between `next()` calls and survives nodes being moved or removed
    mid-iteration. After the end is reported, iteration starts again from the
    front; `reset_cursor()` restarts it at any time. `unlink` raises
    `ValueError` for a node of another region.
- `lfucore.timeutil`
  - `Instant`: a monotonic point in nanoseconds; `Instant.now()` and
    `checked_add(duration)` (returns `None` past 2**64 - 1 ns).
  - `Clock` reads monotonic time; `MockClock` only moves on
    `increment(duration)`.
  - `AtomicInstant`: a thread-safe optional instant with `reset`, `is_set`,
    `instant` and `set_instant`.
  - `ensure_expirations(time_to_live, time_to_idle)`: raises `ValueError`
    when either `timedelta` is longer than 1000 years.
- `lfucore.thread_pool`
  - `PoolName`: `HOUSEKEEPER` and `INVALIDATOR`; worker threads are named
    `lfucore-housekeeper-N` and `lfucore-invalidator-N`.
  - `ThreadPool`: worker threads running jobs after a delay;
    `execute_after(delay, func)` returns a `concurrent.futures.Future`, and
    `shutdown()` stops the workers and cancels jobs not yet started.
  - `ThreadPoolRegistry.acquire_pool(name)` hands out one shared pool per
    name (one thread per CPU), and `release_pool(pool)` shuts it down once
    its last client has released it.
- `lfucore.value_initializer`
  - `ValueInitializer`: when many asyncio tasks ask for the same key at once,
    only one runs its init awaitable; the others wait and share the outcome.
    `init_or_read(key, init)` and `try_init_or_read(key, init, error_type)`
    return `Initialized`, `ReadExisting` or `InitErr`. If the running init
    raises an unexpected exception or its task is cancelled, waiting callers
    retry (up to 200 times, then `RuntimeError`). Successful waiters stay
    registered until `remove_waiter(key, type_id)` is called.

## What it does not do

There is no ready-made cache class here: no `get`/`insert` map, no eviction
loop and no expiration scheduling. The package supplies the parts such a
cache is built from.

## Installation

```
pip install lfucore
```

## Examples

Estimating popularity:

```python
from lfucore.frequency_sketch import FrequencySketch

sketch = FrequencySketch()
sketch.ensure_capacity(512)
h = hash("key")
sketch.increment(h)
sketch.increment(h)
assert sketch.frequency(h) == 2
```

Keeping entries in access order:

```python
from lfucore.deque import Deque
from lfucore.node import CacheRegion, DeqNode

deque = Deque(CacheRegion.MAIN_PROBATION)
a = deque.push_back(DeqNode(CacheRegion.MAIN_PROBATION, "a"))
deque.push_back(DeqNode(CacheRegion.MAIN_PROBATION, "b"))
deque.move_to_back(a)
assert [element for element in deque] == ["b", "a"]
```

Running a job later on a shared pool:

```python
from datetime import timedelta
from lfucore.thread_pool import PoolName, ThreadPoolRegistry

pool = ThreadPoolRegistry.acquire_pool(PoolName.HOUSEKEEPER)
future = pool.execute_after(timedelta(milliseconds=10), lambda: 42)
assert future.result() == 42
ThreadPoolRegistry.release_pool(pool)
```

Computing a value once for many waiting tasks:

```python
import asyncio
from lfucore.value_initializer import Initialized, ValueInitializer

async def main():
    initializer = ValueInitializer()

    async def load():
        await asyncio.sleep(0.1)
        return "value"

    result = await initializer.init_or_read("key", load())
    assert isinstance(result, Initialized)

asyncio.run(main())
```

## Running the tests

```
pip install -e ".[test]"
pytest
```
"""Building blocks for TinyLFU caches: deques, a frequency sketch, time helpers, thread pools and async value initialization."""

__version__ = "0.1.0"

__all__ = [
    "deque",
    "frequency_sketch",
    "node",
    "thread_pool",
    "timeutil",
    "value_initializer",
]
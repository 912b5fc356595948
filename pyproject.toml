[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lfucore"
version = "0.1.0"
description = "Building blocks for TinyLFU caches: access-order deques, a frequency sketch, time helpers, shared thread pools and async value initialization"
requires-python = ">=3.10"
dependencies = []
keywords = ["cache", "tinylfu", "lfu", "lru", "count-min-sketch", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["lfucore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

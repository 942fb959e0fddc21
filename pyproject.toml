[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kvbench"
version = "0.1.0"
description = "Key-value store benchmark toolkit: workload configuration, key sets, index structures and request encodings"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "benchmark",
    "key-value",
    "hash table",
    "lru cache",
    "workload",
    "rpc",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Benchmark",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kvbench"]

[tool.hatch.build.targets.sdist]
include = ["kvbench", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

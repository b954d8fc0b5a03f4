[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "svcutils"
version = "0.1.0"
description = "Service utilities: scoped and labeled metrics, protobuf hashing, weighted random selection, generic sets and a profiling HTTP server."
requires-python = ">=3.10"
dependencies = [
    "protobuf",
]
keywords = ["metrics", "prometheus", "protobuf", "hashing", "sets", "weighted-random", "profiling"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["svcutils"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

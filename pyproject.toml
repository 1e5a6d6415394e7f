[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lincheck"
version = "0.2.1"
description = "A linearizability checker for concurrent data structures"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "concurrency",
    "linearizability",
    "testing",
    "verification",
    "lock-free",
]
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
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lincheck"]

[tool.hatch.build.targets.sdist]
include = ["lincheck", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

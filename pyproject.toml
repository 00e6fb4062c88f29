[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "repotools"
version = "0.1.0"
description = "File and shell tools for a coding agent working inside a repository: read, write, fuzzy edit, undo and bash."
requires-python = ">=3.10"
dependencies = []
keywords = ["agent", "tools", "edit", "fuzzy-match", "repository"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["repotools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

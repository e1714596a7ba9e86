[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minibtree"
version = "0.1.0"
description = "In-memory storage pages and a unique-key B+ tree index for a small relational database engine"
requires-python = ">=3.10"
dependencies = []
keywords = ["b+tree", "index", "database", "storage", "pages", "bitmap", "slotted-page"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["minibtree"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

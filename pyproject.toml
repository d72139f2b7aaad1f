[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "checkerschain"
version = "0.1.0"
description = "Checkers game state machine with wagers, move deadlines and an expiry queue, modelled as a ledger module"
requires-python = ">=3.10"
dependencies = []
keywords = ["checkers", "draughts", "board-game", "ledger", "wager", "state-machine"]
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
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["checkerschain"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

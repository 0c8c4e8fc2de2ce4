[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bzemods"
version = "0.1.0"
description = "In-memory state machine for the cointrunk news-curation chain module, with coins, bech32 addresses and key-value stores"
requires-python = ">=3.10"
dependencies = []
keywords = ["blockchain", "state-machine", "keeper", "genesis", "bech32", "cointrunk", "governance"]
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
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bzemods"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "goblin"
version = "0.1.0"
description = "Guild economy core for a Discord game bot: banks, member accounts, plugins and MongoDB storage."
requires-python = ">=3.10"
keywords = ["discord", "bot", "economy", "bank", "mongodb", "game"]
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
    "Topic :: Games/Entertainment",
    "Topic :: Communications :: Chat",
    "Topic :: Database :: Front-Ends",
]
dependencies = [
    "pymongo",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["goblin"]

[tool.hatch.build.targets.sdist]
include = ["goblin", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

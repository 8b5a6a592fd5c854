[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cdtextdiff"
version = "0.1.0"
description = "Parse, inspect and compare CD-TEXT pack data byte by byte."
requires-python = ">=3.10"
dependencies = []
keywords = ["cd-text", "cd", "audio-cd", "lead-in", "diff", "mmc", "cdrdao"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: CD Audio",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cdtext-diff = "cdtextdiff.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cdtextdiff"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

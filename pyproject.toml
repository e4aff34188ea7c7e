[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pommesound"
version = "0.1.0"
description = "Classic Mac sound resource parsing, MACE/IMA4/a-law/mu-law decoding and a software mixer"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "snd", "mace", "ima4", "adpcm", "ulaw", "alaw", "mixer", "macintosh"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["pommesound"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

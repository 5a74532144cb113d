[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "booga"
version = "0.1.0"
description = "A cube-rolling puzzle game, with a quad drawing layer and WAV decoding and audio format conversion"
requires-python = ">=3.10"
keywords = ["game", "puzzle", "audio", "wav", "resampling", "drawing", "quads"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]
dependencies = [
    "numpy",
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
booga-cube = "booga.cube:main"

[tool.hatch.build.targets.wheel]
packages = ["booga"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true

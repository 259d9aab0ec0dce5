[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wildwave"
version = "0.1.0"
description = "Wavetable MIDI building blocks: patch configuration, resampling, voice mixing, options and library state"
requires-python = ">=3.10"
dependencies = []
keywords = ["midi", "wavetable", "synthesizer", "gus", "patch", "resampling", "pcm"]
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
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wildwave"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

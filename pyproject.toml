[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sentdecode"
version = "0.1.0"
description = "Decoder for SENT sensor pulse streams, with slow-channel messages, sensor value decoding and text status reports"
requires-python = ">=3.10"
dependencies = []
keywords = ["sent", "j2716", "automotive", "sensor", "decoder", "crc4"]
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
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sentdecode = "sentdecode.report:main"

[tool.hatch.build.targets.wheel]
packages = ["sentdecode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

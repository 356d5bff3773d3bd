[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pminstall"
version = "0.1.0"
description = "Plugin installation steps: download, unpack, validate, copy, delete and run, driven by XML step descriptions"
requires-python = ">=3.10"
dependencies = []
keywords = ["plugin", "installer", "download", "unzip", "install steps"]
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
    "Topic :: System :: Installation/Setup",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pminstall"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

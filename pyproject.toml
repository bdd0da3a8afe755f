[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "webprobe"
version = "0.1.0"
description = "Building blocks for probing HTTP services: a probing client, response analysis, title and domain extraction, and capability probes."
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["http", "probe", "recon", "virtual-host", "csp", "http2", "pipelining"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Security",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
webprobe-functional-test = "webprobe.functional:main"

[tool.hatch.build.targets.wheel]
packages = ["webprobe"]

[tool.hatch.build.targets.sdist]
include = ["webprobe", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

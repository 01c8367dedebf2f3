[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "prpll"
version = "0.1.0"
description = "Tools for Mersenne-number work: P-1 bound estimation, FFT shapes, prime utilities, hashing and checked file I/O"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "mersenne",
    "prp",
    "p-1",
    "factoring",
    "primes",
    "fft",
    "dickman",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
prpll-pm1 = "prpll.pm1:main"

[tool.hatch.build.targets.wheel]
packages = ["prpll"]

[tool.hatch.build.targets.sdist]
include = ["prpll", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

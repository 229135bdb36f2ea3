[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "opct"
version = "0.1.0"
description = "Building blocks for reviewing OpenShift/OKD provider compatibility results: error counters, archive metadata parsing, archive redaction and a failure filter pipeline."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "openshift",
    "okd",
    "kubernetes",
    "conformance",
    "sonobuoy",
    "test-results",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["opct"]

[tool.hatch.build.targets.sdist]
include = ["opct", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

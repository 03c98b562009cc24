[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "milterkit"
version = "0.1.0"
description = "A small library for writing mail filters that speak the milter protocol to an MTA"
requires-python = ">=3.10"
keywords = ["milter", "smtp", "mail", "filter", "postfix", "sendmail"]
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
    "Topic :: Communications :: Email :: Filters",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["milterkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

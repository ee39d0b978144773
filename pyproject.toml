[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "occomp"
version = "0.5.0"
description = "Symbol tables, type checking and intermediate-code emission for the oc teaching language"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "oc", "symbol table", "type checking", "code generation", "ast"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Compilers",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["occomp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "discreet"
version = "0.1.0"
description = "Build finite difference schemes for 2D PDEs from an equation and a stencil."
requires-python = ">=3.10"
dependencies = []
keywords = ["cfd", "pde", "finite-difference", "taylor-table", "numerical-methods"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
discreet = "discreet.finite_diff:main"

[tool.hatch.build.targets.wheel]
packages = ["discreet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

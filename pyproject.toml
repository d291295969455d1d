[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "steambuddy"
version = "0.1.0"
description = "Building blocks for controlling Steam on a Linux host: registry parsing, Steam process tracking, resolution and power state scheduling."
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["steam", "vdf", "registry", "linux", "process-monitoring", "resolution"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["steambuddy"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 120
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

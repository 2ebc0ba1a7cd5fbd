[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "canstudio"
version = "0.1.0"
description = "CAN bus simulation components: device abstraction, bus load meter, frame filter, trace logger and trace player"
requires-python = ">=3.10"
dependencies = []
keywords = ["can", "canbus", "simulation", "automotive", "trace", "bus-load"]
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
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN)",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["canstudio"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 120
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "legotrain"
version = "0.1.0"
description = "Control Bluetooth Low Energy train hubs: frame building, notification parsing, connection management and data upload"
requires-python = ">=3.10"
dependencies = []
keywords = ["bluetooth", "ble", "train", "hub", "remote control"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["legotrain"]

[tool.pytest.ini_options]
addopts = "-ra"

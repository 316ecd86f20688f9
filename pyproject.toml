[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cray"
version = "0.1.0"
description = "Headless views for inspecting containers: processes, mounts, network, runtime and pods"
requires-python = ">=3.10"
dependencies = []
keywords = ["containers", "containerd", "kubernetes", "monitoring", "processes", "mounts"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cray"]

[tool.pytest.ini_options]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "procmetrics"
version = "0.1.0"
description = "Parse system, kernel and device metrics from the Linux proc, sys and configfs pseudo-filesystems"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "procfs",
    "sysfs",
    "configfs",
    "metrics",
    "linux",
    "monitoring",
    "mdstat",
    "ipvs",
    "mountinfo",
    "diskstats",
    "bcache",
    "iscsi",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["procmetrics"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "espdaplink"
version = "0.1.0"
description = "USB/IP structures, USB descriptors and control requests, elaphureLink framing and KCP timing helpers for a wireless CMSIS-DAP debug probe"
requires-python = ">=3.10"
dependencies = []
keywords = ["cmsis-dap", "usbip", "elaphurelink", "usb", "descriptors", "kcp", "debug-probe"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["espdaplink"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

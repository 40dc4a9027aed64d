[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "x16emu"
version = "0.1.0"
description = "Core pieces of a Commander X16 emulator: 65C02 CPU, disassembler, cartridge images, I2C bus, file helpers and window icon"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "65c02", "6502", "commander-x16", "disassembler", "cartridge", "i2c"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["x16emu"]

[tool.pytest.ini_options]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "armlutgen"
version = "0.1.0"
description = "Generate ARM and THUMB opcode dispatch lookup tables for an ARM7TDMI core"
requires-python = ">=3.10"
dependencies = []
keywords = ["arm7tdmi", "arm", "thumb", "decoder", "lookup-table", "code-generation", "emulator"]
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
    "Topic :: Software Development :: Code Generators",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
armlutgen = "armlutgen.lut:main"

[tool.hatch.build.targets.wheel]
packages = ["armlutgen"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "driftboard"
version = "0.1.0"
description = "A shared multiplayer drifting-dot board: a WebSocket relay server and the motion, trail and sound model its clients use"
requires-python = ">=3.10"
keywords = ["websocket", "multiplayer", "canvas", "broadcast", "trails"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "aiohttp>=3.9",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
driftboard-server = "driftboard.server:main"

[tool.hatch.build.targets.wheel]
packages = ["driftboard"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

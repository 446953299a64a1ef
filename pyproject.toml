[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "omnibot"
version = "0.1.0"
description = "Control core for a three-wheeled omni-wheel robot: kinematics, PWM motor and IMU drivers, LEDs and a WebSocket command server"
requires-python = ">=3.10"
keywords = ["robotics", "omni-wheel", "kinematics", "i2c", "pca9685", "icm42670", "websocket"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Topic :: Scientific/Engineering :: Human Machine Interfaces",
]
dependencies = [
    "aiohttp",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
omnibot-mock-mcu = "omnibot.mock_mcu:main"

[tool.hatch.build.targets.wheel]
packages = ["omnibot"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

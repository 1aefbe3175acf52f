[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rabbitkit"
version = "0.1.0"
description = "RabbitMQ publishing helpers: topology building, buffered auto-publishing, payload compression and encryption."
requires-python = ">=3.10"
keywords = ["rabbitmq", "amqp", "publisher", "topology", "messaging", "aes-gcm", "zstd"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Networking",
]
dependencies = [
    "cryptography>=44",
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rabbitkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

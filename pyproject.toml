[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "simpleoneapi"
version = "0.1.0"
description = "Building blocks for an OpenAI-compatible LLM gateway: message handling, rate limiting, SSE streaming and HTTP helpers."
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = [
    "openai",
    "llm",
    "gateway",
    "proxy",
    "rate-limiting",
    "server-sent-events",
    "chat-completions",
]
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
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["simpleoneapi"]

[tool.hatch.build.targets.sdist]
include = [
    "simpleoneapi",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wildgecu"
version = "0.1.0"
description = "Cron-scheduled LLM prompts, agent file and command tools, prompt assembly and a daemon chat client"
requires-python = ">=3.10"
keywords = ["agent", "llm", "cron", "scheduler", "ndjson"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
wildgecu = "wildgecu.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["wildgecu"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

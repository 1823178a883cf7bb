[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lifehook"
version = "0.1.0"
description = "Ordered start and stop hooks for application lifecycles, with event logging, call-site capture and test helpers."
requires-python = ">=3.11"
dependencies = []
keywords = ["lifecycle", "hooks", "startup", "shutdown", "context", "testing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lifehook"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

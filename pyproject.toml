[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "manifestscore"
version = "0.1.0"
description = "Static checks that grade Kubernetes object manifests against reliability and security recommendations"
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "manifest", "lint", "static-analysis", "security", "reliability"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["manifestscore"]

[tool.pytest.ini_options]
addopts = "-ra"

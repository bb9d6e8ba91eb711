[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pixiu"
version = "0.1.0"
description = "Cluster registration, CI/CD job and role-based access services for a Kubernetes administration platform"
requires-python = ">=3.10"
keywords = ["kubernetes", "rbac", "cicd", "jenkins", "sqlalchemy", "lru", "aes"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "cryptography",
    "sqlalchemy>=2.0",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pixiu"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true

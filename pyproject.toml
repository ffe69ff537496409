[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "me3"
version = "0.3.0"
description = "Mod profile tooling and Steam launcher front end for ELDEN RING and ELDEN RING NIGHTREIGN"
requires-python = ">=3.11"
keywords = ["modding", "mod-profile", "elden-ring", "nightreign", "steam", "proton"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: Microsoft :: Windows",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Role-Playing",
]
dependencies = [
    "tomli-w>=1.0",
    "platformdirs>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
me3 = "me3.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["me3"]

[tool.hatch.build.targets.sdist]
include = ["me3", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true

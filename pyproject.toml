[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nanonn"
version = "0.1.0"
description = "A small fully connected neural network for MNIST handwritten digit recognition"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "pillow",
]
keywords = ["mnist", "neural-network", "digit-recognition", "machine-learning", "backpropagation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: X11 Applications",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
nanonn = "nanonn.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["nanonn"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

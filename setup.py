"""Setup configuration for the jigsaw-board package."""

from setuptools import find_packages, setup

setup(
    name="jigsaw-board",
    version="0.1.0",
    packages=find_packages(include=["jigsaw_shapes", "jigsaw_shapes.*", "app", "app.*"]),
    install_requires=[
        "fastapi",
        "numpy",
        "pydantic",
        "pydantic-settings",
    ],
    extras_require={
        "dev": [
            "httpx",
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
            "isort",
        ],
    },
)

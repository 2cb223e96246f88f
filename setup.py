"""Setup script for the levelmon package."""

from setuptools import find_packages, setup

setup(
    name="levelmon",
    version="0.1.0",
    description="Level sensor sampling and SQLite recording service",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "python-dotenv",
    ],
    extras_require={
        "dev": [
            "pytest",
            "black",
            "isort",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "levelmon-collector=levelmon.collector:main",
        ],
    },
)

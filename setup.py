from setuptools import setup, find_packages
import os

# Install the translation compiler package `phrasebook` from the repo root.

# Read the contents of your README file for long description
this_directory = os.path.abspath(os.path.dirname(__file__))
try:
    with open(os.path.join(this_directory, 'README.md'), encoding='utf-8') as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = "A compiler for translation templates with typed expressions and plural rules"

setup(
    name="phrasebook",
    version="0.1.0",
    description="A compiler for translation templates with typed expressions and plural rules",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["phrasebook", "phrasebook.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
        ],
    },
)

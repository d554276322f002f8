# setup.py
from setuptools import setup, find_packages

setup(
    name="akibaflow",
    version="0.1.0",
    description="A command line client for the AkibaFlow personal finance API",
    author="AkibaFlow",
    packages=find_packages(include=["akibaflow", "akibaflow.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click>=8.0",
        "pyyaml>=5.3",
        "python-dotenv>=0.19",
        "httpx>=0.24",
        "pydantic>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "akibaflow=akibaflow.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

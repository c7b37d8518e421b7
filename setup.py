# setup.py

from setuptools import setup, find_packages

setup(
    name="segprune",
    version="0.1.0",
    description="Exact dynamic-programming pruning of candidate change points in multivariate signals",
    packages=find_packages(exclude=["tests*", "benchmarks*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
            "pandas",
        ],
    },
)

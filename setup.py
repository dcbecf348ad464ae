from setuptools import setup, find_packages

setup(
    name="caching-presenter",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pydantic",
        "pydantic-settings",
        "structlog",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    python_requires=">=3.8",
)

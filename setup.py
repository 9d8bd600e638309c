"""
Setup script for todokeep.
"""
from setuptools import setup, find_packages

setup(
    name="todokeep",
    version="0.1.0",
    packages=find_packages(include=["todokeep", "todokeep.*"]),
    install_requires=[
        "click>=8.1.0",
        "pydantic>=2.5.0",
        "pydantic-core>=2.14.0",
        "pydantic-settings>=2.1.0",
    ],
    extras_require={
        "postgres": [
            "psycopg2-binary>=2.9.0",
        ],
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "todokeep=todokeep.__main__:main",
            "todo=todokeep.cli:cli",
        ],
    },
    python_requires=">=3.11",
)

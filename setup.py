# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from setuptools import setup, find_packages

setup(
    name="plugsmith",
    version="0.1.0",
    description="Build every plugin of a JavaScript library as a standalone UMD bundle",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["plugsmith", "plugsmith.*"]),
    install_requires=[
        "click>=8.1",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "PyYAML>=6.0",
        "rich>=13.0",
        "tree-sitter==0.24.0",
        "tree-sitter-javascript==0.23.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Programming Language :: Python",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
    ],
    license="MIT",
    entry_points={
        'console_scripts': [
            'plugsmith=plugsmith.cli.cli:main',
        ],
    },
    python_requires=">=3.10",
)

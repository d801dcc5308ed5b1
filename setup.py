#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import setup

def get_README():
    content = ""
    with open("README.md") as f:
        content += f.read()
    return content

setup(
    name="netstring-parser",
    python_requires=">=3.8",
    version="0.1.0",
    license="BSD",
    description="Incremental, zero-copy netstring decoding for streamed input.",
    long_description=get_README(),
    long_description_content_type="text/markdown",
    packages=["netstring_parser"],
    package_data={"netstring_parser": ["py.typed"]},
    zip_safe=False,
    install_requires=[
        "requests",
        "typing_extensions"
    ],
    extras_require={
        "dev": ["mypy"],
        "test": ["pytest"]
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10"
    ],
)

#!/usr/bin/env python

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from setuptools import find_packages, setup

# Core dependencies required for all installations
install_requires = [
    "boto3==1.38.36",  # Core dependency for AWS services
]

# Optional dependencies by component
extras_require = {
    # Testing dependencies
    "test": [
        "pytest>=7.4.0",
        "pytest-cov>=4.1.0",
        "pytest-xdist>=3.3.1",  # For parallel test execution
    ],
}

setup(
    name="dyndocs",
    version="0.1.0",
    packages=find_packages(
        exclude=[
            "tests",
            "tests.*",
            "build",
            "build.*",
        ]
    ),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=install_requires,
    extras_require=extras_require,
)

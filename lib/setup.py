#!/usr/bin/env python3

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Setup configuration for activities_common package.

This shared library provides utilities for the scraping Lambda functions including:
- Firecrawl structured extraction client
- Activity normalization and deterministic identities
- Scraping task state tracking (DynamoDB)
- Activity storage (DynamoDB) and snapshot publication (S3)
- Source registry and data models
"""

from setuptools import find_packages, setup

setup(
    name="activities_common",
    version="0.1.0",
    description="Shared utilities for family activities scraping Lambda functions",
    packages=find_packages(include=["activities_common", "activities_common.*"]),
    package_data={"activities_common": ["sources.json"]},
    python_requires=">=3.12",
    install_requires=[
        "boto3>=1.34.0",
        # Extraction service client
        "httpx>=0.27.0",
    ],
    author="Development Team",
    license="MIT-0",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)

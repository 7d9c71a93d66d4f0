#!/usr/bin/env python3
"""
Setup configuration for GroupHunt
Configured to work with the existing project structure
"""

from setuptools import setup, find_packages
import os
from pathlib import Path

# Read the full description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8') if (this_directory / "README.md").exists() else ""

# Read the version from __init__.py file
def get_version():
    """Get the version from __init__.py file"""
    version_file = os.path.join(os.path.dirname(__file__), 'grouphunt', '__init__.py')
    try:
        with open(version_file, 'r', encoding='utf-8') as f:
            for line in f:
                if line.strip().startswith('__version__'):
                    # Extract the version from the string
                    return line.split('=')[1].strip().strip('"').strip("'")
    except FileNotFoundError:
        pass
    return "1.0.0"  # Default version

# Essential required dependencies
REQUIRED = [
    "click>=8.0.0",          # CLI interface
    "requests>=2.28.0",      # Proxy list download
    "pyyaml>=6.0",           # Configuration files
    "aiohttp>=3.8.0",        # Asynchronous requests
    "aiohttp-socks>=0.8.0",  # SOCKS proxy connector
    "aiofiles>=23.1.0",      # Async result file I/O
    "rich>=13.0.0",          # Console monitor and tables
]

# Optional dependencies
EXTRAS = {
    'dev': [
        "pytest>=7.0.0",
        "pytest-cov>=4.0.0",
        "black>=22.0.0",
        "flake8>=5.0.0",
        "mypy>=1.0.0",
    ]
}

setup(
    # Basic package information
    name="grouphunt",
    version=get_version(),
    description="Proxy-pool scanner for claimable group funds",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # License and classifications
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Internet :: Proxy Servers",
        "Framework :: AsyncIO",
    ],
    keywords="proxy, scanner, asyncio, socks5",

    # Python requirements
    python_requires=">=3.10",

    # Packages and files
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,

    # Dependencies
    install_requires=REQUIRED,
    extras_require=EXTRAS,

    # Entry points (Console Scripts)
    entry_points={
        'console_scripts': [
            'grouphunt=grouphunt.main:main',
        ],
    },

    # Additional settings
    zip_safe=False,
    platforms=["any"],
)

"""Setup configuration for the arcbos-ops-core package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="arcbos-ops-core",
    version="1.0.0",
    author="ARCBOS Engineering",
    description="Validation, supplier scoring and cross-referencing for engineering records",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["arcbos_ops", "arcbos_ops.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "pyyaml>=6.0",
        "python-json-logger>=3.1.0",
        "click>=8.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "arcbos-ops=arcbos_ops.cli:main",
        ],
    },
    include_package_data=True,
    package_data={
        "arcbos_ops": ["config/*.yaml"],
    },
)

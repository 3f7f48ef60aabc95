#!/usr/bin/env python3
"""
Setup script for the admissions report tool.

Install with:
    pip install -e .

With test tooling:
    pip install -e ".[dev]"
"""

from setuptools import setup
from pathlib import Path

# Read version
version_file = Path(__file__).parent / "version.py"
version_dict = {}
exec(version_file.read_text(), version_dict)
__version__ = version_dict.get("__version__", "0.3.0")

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="admissions-report",
    version=__version__,
    author="Admissions Dashboard Contributors",
    author_email="",
    description="Paginated PDF reports for a university admission campaign dashboard",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    py_modules=[
        "admission_types",
        "admission_aggregation",
        "admissions_api",
        "report_layout",
        "report_assets",
        "report_sections",
        "report_charts",
        "report_pdf",
        "web_ui",
        "config",
        "logging_config",
        "cli",
        "version",
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Education",
        "Topic :: Office/Business",
    ],
    python_requires=">=3.11",
    install_requires=[
        "requests>=2.28.0",
        "tenacity>=8.0.0",
        "gradio>=4.0.0",
        "reportlab>=4.0.0",
        "Pillow>=9.0.0",
        # renderPM backend that rasterizes the passing score chart
        "rlPyCairo>=0.2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "pyright>=0.1.0",
            "pre-commit>=3.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "admissions-report=cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords="admissions report pdf reportlab dashboard",
)

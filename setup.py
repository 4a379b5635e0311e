"""Setup script for MedTrans."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README
readme = Path("README.md").read_text(encoding="utf-8")

setup(
    name="medtrans",
    version="1.0.0",
    description="Offline English to Arabic medical document translation",
    long_description=readme,
    long_description_content_type="text/markdown",
    author="MedTrans Team",
    license="MIT",

    packages=find_packages(exclude=["tests*", "docs*"]),
    package_data={
        "medtrans.terminology": ["data/*.json", "data/*.txt"],
    },
    include_package_data=True,

    python_requires=">=3.9",

    install_requires=[
        "pyyaml>=6.0",
        "rich>=13.0.0",
        "python-dotenv>=1.0.0",
        "PyMuPDF>=1.24.0",
        "typer>=0.9.0",
        "loguru>=0.7.0",
    ],

    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },

    entry_points={
        "console_scripts": [
            "medtrans=cli.commands.main:cli",
        ],
    },

    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Natural Language :: Arabic",
        "Topic :: Text Processing :: Linguistic",
    ],

    keywords="translation medical arabic pdf offline",
)

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file for the long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="vhd",
    version="0.4.0",
    description="A virtual hard drive: one catalog over local folders and cloud buckets",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["vhd", "vhd.*"]),
    entry_points={
        "console_scripts": [
            "vhd=vhd.cli:app"
        ],
    },
    install_requires=[
        # Core dependencies only
        "typer>=0.9.0",
        "rich>=13.0.0",
        "prompt_toolkit>=3.0.0",
        "SQLAlchemy>=1.4.0",
        "pyyaml>=6.0",
        "google-crc32c>=1.5.0",
    ],
    extras_require={
        # Google Cloud Storage drives
        "gcs": [
            "google-cloud-storage>=2.10.0",
        ],
        "all": [
            "google-cloud-storage>=2.10.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "google-cloud-storage>=2.10.0",
            "black>=23.0.0",
            "isort>=5.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Topic :: System :: Archiving :: Backup",
        "Topic :: System :: Filesystems",
    ],
    python_requires='>=3.8',
)

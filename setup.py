import os
from setuptools import setup, find_packages

# Import version from the package without importing the whole package
with open(os.path.join('stak', '__init__.py'), 'r') as f:
    for line in f:
        if line.startswith('__version__'):
            version = line.split('=')[1].strip().strip('"').strip("'")
            break

setup(
    name="stak",
    version=version,
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml>=6.0,<7.0",
        "requests>=2.25",
        "beautifulsoup4>=4.9",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "stak=stak.cli:main",
        ],
    },
    author="stak contributors",
    author_email="",
    description="Intelligent terminal scratchpad that classifies and files your notes by day",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Environment :: Console :: Curses",
        "Topic :: Text Editors",
        "Topic :: Utilities",
    ],
    python_requires=">=3.9",
    include_package_data=True,
)

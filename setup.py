import os
from setuptools import setup, find_packages

# Read version from _version.py (exec, not import: package isn't installed yet)
version_file = os.path.join(os.path.dirname(__file__), "winstash", "_version.py")
with open(version_file) as f:
    exec(f.read())

setup(
    name="winstash",
    version=get_pip_version() if "get_pip_version" in locals() else "0.0.0",
    description="Save and restore window positions per display layout",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={
        "console_scripts": [
            "winstash=winstash.cli:main",
        ],
    },
    install_requires=[
        "psutil>=5.9.0",
        'pywin32>=305; platform_system=="Windows"',
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "Operating System :: Microsoft :: Windows",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Desktop Environment",
        "Topic :: Utilities",
    ],
    python_requires=">=3.8",
)

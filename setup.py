from setuptools import find_packages, setup

with open("README.md", encoding="utf-8") as fh:
    long_description = fh.read()

requirements = [
    "python-dotenv>=1.0.0",
    "rich>=13.0.0",
]

setup(
    name="reclaim-linux",
    version="0.1.0",
    author="reclaim maintainers",
    description="Disk-space reclamation for Linux hosts",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["reclaim", "reclaim.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Systems Administration",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "reclaim=reclaim.cli:main",
        ],
    },
    include_package_data=True,
)

from setuptools import setup, find_packages

setup(
    name="sizesort",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    description="Rank every file and folder under a directory by size and write a banded report.",
    author="Max Carlson",
    author_email="carlsonamax@gmail.com",
    python_requires=">=3.8",
    install_requires=[
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "sizesort=sizesort.cli:main",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

from setuptools import setup, find_packages

setup(
    name="partial_stage",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "textual>=0.47",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "partial-stage=partial_stage.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Stage individual added and removed lines of a file with git.",
)

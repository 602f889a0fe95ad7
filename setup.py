"""Setup script for style-pre-commit-hook."""

from setuptools import setup

setup(
    name="style-pre-commit-hook",
    version="0.1.0",
    description="Git pre-commit hook that runs a style checker and offers autoformatting",
    packages=["style_hook"],
    python_requires=">=3.9",
    install_requires=[
        'tomli>=1.1.0; python_version < "3.11"',
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "style-pre-commit=style_hook.pre_commit:main",
            "style-hook-install=style_hook.install:main",
        ],
    },
)

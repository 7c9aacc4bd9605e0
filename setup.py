from setuptools import setup, find_packages

setup(
    name="pix-brcode",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pydantic>=2.0",
        "typing-extensions>=4.7",
        "asgi-correlation-id>=4.0",
    ],
    extras_require={
        "cli": [
            "typer>=0.9",
            "rich>=13.0",
        ],
        "test": [
            "pytest>=7.0",
            "typer>=0.9",
            "rich>=13.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pix-brcode=pix_brcode_cli.main:app",
        ],
    },
    python_requires=">=3.9,<4.0",
)

from setuptools import setup, find_packages

setup(
    name="attachment-inliner",
    version="0.1.0",
    packages=find_packages(include=["attachment_inliner", "attachment_inliner.*"]),
    include_package_data=True,
    install_requires=[
        "structlog>=23.1.0",
        "pydantic>=2.0.0",
        "typer>=0.9.0",
        "pyyaml>=6.0.1",
        "aiofiles>=23.2.1",
        "aiohttp>=3.9.0",
        "pymupdf>=1.23.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "attachment-inliner=attachment_inliner.cli:main",
        ],
    },
    python_requires=">=3.11",
)

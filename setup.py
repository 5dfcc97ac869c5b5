from setuptools import setup, find_packages

setup(
    name="poi-consensus",
    version="0.1.0",
    packages=find_packages(include=["poi_core", "poi_core.*"]),
    install_requires=[
        # HTTP API
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "httpx>=0.24.0",
        # Data validation and configuration
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",
        # Data processing
        "numpy>=1.24.3",
        # CLI and UI
        "click>=8.1.3",
        "rich>=13.0.0",
        # Logging
        "coloredlogs>=15.0.0",
        # Monitoring
        "prometheus_client>=0.17.0",
        # Serialization
        "orjson>=3.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "poicore=poi_core.cli.main:main",
        ],
    },
    author="poi-consensus contributors",
    description="Stake-weighted median consensus and trust scoring for subnet epochs",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)

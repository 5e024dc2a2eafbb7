from setuptools import setup, find_packages

setup(
    name="helitrack",
    version="1.0.0",
    description="Live rotorcraft telemetry proxy with a quantized regional cache",
    package_dir={"": "backend"},
    packages=find_packages(where="backend"),
    install_requires=[
        "httpx>=0.23",
        "fastapi>=0.95",
        "uvicorn>=0.22",
        "python-dateutil>=2.8",
        "python-dotenv>=1.0",
        "slowapi>=0.1.8",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "pytest-httpx>=0.23,<0.31",  # httpx<0.28: tests mock NaN JSON payloads
        ],
        "lint": [
            "black>=23.0",
            "flake8>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "helitrack=helitrack.main:run",
        ],
    },
)

from setuptools import setup, find_packages

setup(
    name="lingotrack-backend",
    version="0.1.0",
    packages=find_packages(),
    install_requires=[
        "fastapi>=0.95.0",
        "uvicorn>=0.15.0",
        "pydantic>=1.8.0,<2.0.0",
        "sqlalchemy[asyncio]>=1.4.0,<2.0.0",
        "aiosqlite>=0.17.0",
        "python-dotenv>=0.19.0",
        "redis>=4.2.0",
        "pytz>=2021.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
        ],
    },
    python_requires=">=3.9",
)

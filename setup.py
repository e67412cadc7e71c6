from setuptools import find_packages, setup

setup(
    name="push-receiver",
    version="0.1.0",
    packages=find_packages(
        include=[
            "receiver_common",
            "receiver_common.*",
            "receiver_controller",
            "receiver_controller.*",
            "receiver_server",
            "receiver_server.*",
            "receiver_client",
            "receiver_client.*",
        ]
    ),
    install_requires=[
        "requests>=2.31.0",
        "fastapi>=0.104.0",
        "uvicorn>=0.24.0",
        "click>=8.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-xdist>=3.3.0",
            "httpx>=0.25.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "push-receiver=receiver_server.__main__:main",
            "receiver-cli=receiver_client.cli:main",
        ],
    },
    python_requires=">=3.11",
)

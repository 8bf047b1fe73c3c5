from setuptools import setup, find_packages

setup(
    name="ksa-game-rpc",
    version="0.1.0",
    description="Game RPC client - newline-delimited JSON actions over TCP or Unix sockets",
    author="caTTY Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "opentelemetry-api>=1.14.0",
        "opentelemetry-sdk>=1.14.0",
        "opentelemetry-exporter-otlp>=1.14.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov",
            "black",
            "isort",
            "pylint",
        ],
    },
    entry_points={
        "console_scripts": [
            "game-rpc=game_rpc.cli:main",
        ],
    },
    python_requires=">=3.9",
)

"""CryptoLab setup."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="cryptolab",
    version="0.1.0",
    packages=find_packages(include=["cryptolab", "cryptolab.*"]),
    install_requires=[
        "fastapi>=0.110.0",
        "starlette>=0.36.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "cryptography>=41.0.0",
    ],
    extras_require={
        "server": [
            "uvicorn>=0.27.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "httpx>=0.25.0",
        ],
    },
    python_requires=">=3.10",
    author="CryptoLab",
    author_email="",
    description="CryptoLab - finite-field protocol toolkit for teaching",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Education",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security :: Cryptography",
    ],
    keywords="secret-sharing, paillier, elgamal, schnorr, pedersen, zero-knowledge",
)

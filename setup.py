from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="elastic-trading",
    version="0.1.0",
    description="Scripted quote, swap and liquidity operations for KyberSwap Elastic pools",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "results", "venv"]),
    package_data={"elastic_trading": ["abis.json"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "web3>=7.0.0",
        "eth-abi>=5.0.0",
        "eth-account>=0.13.0",
        "python-dotenv>=1.0.0",
        "requests>=2.28.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "elastic-trading=elastic_trading.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)

from setuptools import find_packages, setup

setup(
    name="onchain-prophecy",
    version="1.0.0",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-dotenv>=1.0.0",
        "sqlalchemy>=2.0.0",
        "xxhash>=3.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "prophecy-simulate=prophecy.entrypoints.simulate:main",
        ],
    },
    python_requires=">=3.10",
)

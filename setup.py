from setuptools import setup, find_packages

setup(
    name="gilt_yield_engine",
    version="0.1.0",
    description="Gilt clean/dirty price and yield-to-maturity engine",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
)

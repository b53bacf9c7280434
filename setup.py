from setuptools import setup, find_packages

setup(
    name="rate_monitor",
    version="0.1.0",
    description="Pulse and breathing rate estimation from a streaming scalar signal",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "scipy>=1.10",
    ],
    extras_require={
        "dev": ["pytest>=7.4"],
    },
)

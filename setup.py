from setuptools import setup, find_packages

setup(
    name="convergent",
    version="0.1.0",
    description="Convergent replicated data types (counters and sets) for Python",
    author="adamfilli",
    packages=find_packages(include=["convergent", "convergent.*"]),
    install_requires=[
        "matplotlib",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)

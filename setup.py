from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="votetally",
    version="0.1.0",
    description="Parallel aggregation of weighted vote chunks.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"votetally.schemas": ["*.json"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=["jsonschema", "PyYAML"],
    extras_require={"test": ["pytest"]},
    tests_require=["pytest"],
    entry_points={"console_scripts": ["votetally=votetally.cli:main"]},
)

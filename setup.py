import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    author="Walnut",
    author_email="walnut356@gmail.com",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    description="Streaming reader, frame assembler and stats pipeline for SSBM replay files",
    extras_require={"test": ["pytest"]},
    install_requires=["py-ubjson", "tzlocal", "polars"],
    long_description=long_description,
    long_description_content_type="text/markdown",
    name="py-slp-stream",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    version="0.1.0",
)

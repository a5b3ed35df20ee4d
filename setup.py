import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    author="XPLA",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    include_package_data=True,
    install_requires=["cosmpy>=0.9.2,<0.12", "httpx", "protobuf>=4.22"],
    extras_require={"test": ["pytest"]},
    long_description=long_description,
    long_description_content_type="text/markdown",
    name="xpla-sdk",
    packages=["xpla_sdk"],
    python_requires=">=3.8",
    version="0.1.0",
)

from setuptools import setup, find_packages

setup(
    name="oae-rest",
    version="0.1.0",
    description="Python client and CLI for the OAE REST API",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=["InquirerPy", "tqdm"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "oae=oae_rest.__main__:main",
        ]
    },
)

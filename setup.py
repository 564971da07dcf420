import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="rpc_schema_to_code",
    version="0.1.0",
    description="Generate typed RPC consumers, provider contracts and runtime schemas for Python and TypeScript",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Intended Audience :: Developers",
    ],
    keywords="rpc schema code generation python typescript dataclass protocol template",
    license="MIT",
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "jinja2>=3.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rpc_schema_to_code=rpc_schema_to_code.rpc_schema_to_code:rpc_schema_to_code",
        ],
    },
    include_package_data=True,
    package_data={
        "rpc_schema_to_code": ["templates/*/*.jinja2"],
    },
    zip_safe=False,
)

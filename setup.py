import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="json_schema_compiler",
    version="1.0.0",
    description="Compile JSON Schema documents into Python dataclasses or C# classes",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Software Development :: Compilers",
        "Intended Audience :: Developers",
    ],
    keywords="json schema compiler code generation python csharp dataclass zip plugins",
    author="François Lagunas",
    author_email="francois.lagunas@gmail.com",
    license="MIT",
    packages=find_packages(exclude=["json_schema_compiler.tests", "json_schema_compiler.tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "jinja2>=3.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "json-schema-compiler=json_schema_compiler.driver:main",
        ],
        "json_schema_compiler.plugins": [
            "x-frozen=json_schema_compiler.plugin:FrozenClassesPlugin",
        ],
    },
    include_package_data=True,
    package_data={
        "json_schema_compiler": ["templates/**/*.jinja2"],
    },
    zip_safe=False,
)

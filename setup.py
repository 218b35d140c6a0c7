"""
webpilot - Setup Configuration

Natural-language browser automation: Playwright-driven browser tools behind
a schema-validated tool registry, driven by an LLM planning loop.

License: Apache-2.0
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Core dependencies
core_deps = [
    # Browser automation
    "playwright>=1.55.0",
    # Tool contracts
    "pydantic>=2.11.9",
    "jsonschema>=4.23.0",
    # Planner transport
    "aiohttp>=3.12.15",
    # CLI
    "click>=8.1.0",
    "python-dotenv>=1.0.0",
]

# Development dependencies
dev_deps = [
    # Testing
    "pytest>=8.4.1",
    "pytest-asyncio>=1.0.0",
    "pytest-mock>=3.14.1",
    "pytest-cov>=6.2.1",
]

setup(
    name="webpilot",
    version="0.1.0",

    # Package description
    description="Natural-language browser automation with Playwright tools and an LLM planner",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package discovery
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    # Python version requirement
    python_requires=">=3.11",

    # Dependencies
    install_requires=core_deps,

    # Optional dependencies (extras)
    extras_require={
        "core": core_deps,
        "dev": core_deps + dev_deps,
    },

    # PyPI classifiers
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Internet :: WWW/HTTP :: Browsers",
        "Topic :: Software Development :: Testing",
        "Framework :: AsyncIO",
    ],

    keywords=["browser", "automation", "playwright", "llm", "agents", "gemini", "tools"],

    license="Apache-2.0",

    include_package_data=True,
    zip_safe=False,

    entry_points={
        "console_scripts": [
            "webpilot=webpilot.cli:main",
        ],
    },
)

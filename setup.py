from setuptools import find_packages, setup

setup(
    name="directusclient",
    packages=find_packages("src"),
    package_dir={"": "src"},
    version="0.1.0",
    license="MIT",
    long_description="",
    long_description_content_type="text/markdown",
    description="A simple wrapper over the Directus 6 REST API",
    keywords=["Directus", "CMS", "headless CMS", "API Wrapper"],
    python_requires=">=3.10",
    install_requires=["httpx>=0.27"],
    extras_require={
        "orjson": ["orjson>=3.9"],
        "test": ["pytest>=8", "pytest-asyncio>=0.23"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)

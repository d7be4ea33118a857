import os
import re
import setuptools


HERE = os.path.abspath(os.path.dirname(__file__))


def read(*parts: str) -> str:
    with open(os.path.join(HERE, *parts), "r", encoding="utf-8") as f:
        return f.read()


VERSION = re.search(r"^__version__ = ['\"]([^'\"]+)['\"]", read("emissions_core", "version.py"), re.M).group(1)


setuptools.setup(
    name="emissions_core",
    version=VERSION,
    packages=setuptools.find_packages(include=["emissions_core", "emissions_core.*"]),
    description="REST API demonstrating lost update prevention with entity tags and paginated results",
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    license="GPLv3",
    install_requires=[
        "fastapi>=0.100.0,<1.0",
        "pydantic>=2.0,<3.0",
        "pydantic-settings>=2.0,<3.0",
        "SQLAlchemy>=2.0,<3.0",
        "uvicorn>=0.20.0"
    ],
    extras_require={
        "test": [
            "httpx>=0.24",
            "pytest>=7.0"
        ]
    },
    python_requires=">=3.8",
    classifiers=[
        "Operating System :: OS Independent",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Framework :: FastAPI",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "Programming Language :: Python :: 3",
        "Development Status :: 3 - Alpha"
    ]
)

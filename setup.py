import sys
from os import path

from setuptools import find_packages, setup

min_version = (3, 9)

if sys.version_info < min_version:
    error = """
slnkit does not support Python {0}.{1}.
Python {2}.{3} and above is required. Check your Python version like so:

python3 --version

This may be due to an out-of-date pip. Make sure you have pip >= 9.0.1.
Upgrade pip like so:

pip install --upgrade pip
""".format(
        *sys.version_info[:2], *min_version
    )
    sys.exit(error)


here = path.abspath(path.dirname(__file__))

with open(path.join(here, "README.md"), encoding="utf-8") as readme_file:
    readme = readme_file.read()

requirements = open(path.join(here, "requirements.txt")).read().splitlines()

setup(
    name="slnkit",
    version="0.1.0",
    license="GPL",
    packages=find_packages(),
    description="Visual Studio solution (.sln) and project (.csproj) editing tools",
    long_description=readme,
    long_description_content_type="text/markdown",
    entry_points={
        "console_scripts": [
            "slnkit = slnkit.__main__:main",
        ]
    },
    package_data={
        "slnkit": ["sln.lark", "tests/solutions/*"],
    },
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "json": ["apischema"],
        "test": ["pytest", "apischema"],
    },
)

from pathlib import Path

from setuptools import find_packages, setup

# Read the contents of README.md, for PyPI
LONG_DESCRIPTION = (Path(__file__).parent / "README.md").read_text()

REQUIREMENTS = [
    "matplotlib",
    "numpy",
    "openpyxl",
    "pandas",
    "scipy",
    "xlrd",
]

TEST_REQUIREMENTS = (
    (Path(__file__).parent / "test_requirements.txt").read_text().splitlines()
)

SETUP_REQUIREMENTS = ["setuptools >=28", "setuptools_scm"]
EXTRAS_REQUIRE = {"tests": TEST_REQUIREMENTS}

setup(
    name="satprops",
    use_scm_version={"write_to": "satprops/version.py", "fallback_version": "0.0.0"},
    description=(
        "Relative permeability and capillary pressure per grid cell, "
        "with endpoint scaling and hysteresis"
    ),
    entry_points={"console_scripts": ["satprops = satprops.satpropscli:main"]},
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    license="LGPLv3",
    keywords="relative permeability, capillary pressure, endpoint scaling, "
    "reservoir simulation",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        (
            "License :: OSI Approved :: "
            "GNU Lesser General Public License v3 or later (LGPLv3+)"
        ),
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
    ],
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"satprops": ["py.typed"]},
    zip_safe=False,
    python_requires=">=3.7",
    install_requires=REQUIREMENTS,
    setup_requires=SETUP_REQUIREMENTS,
    extras_require=EXTRAS_REQUIRE,
)

from setuptools import setup

# Package Metadata
NAME = "asnlp"
DESCRIPTION = "evaluation interface for nonlinear programs. \
                asnlp:      model contract, counters, coordinate format, linear operators\
                            closed-form, torch autodiff and slack models, derivative checks"
URL = ""
EMAIL = "li.jiayun@outlook.com"
AUTHOR = "Jiayun Li"
REQUIRES_PYTHON = ">=3.9"
VERSION = "0.0.1"

REQUIRED = [
    "numpy",
    "scipy",
    "torch",
    "numba"
]

EXTRAS = {
    "test": ["pytest"],
}

setup(
    name=NAME,
    version=VERSION,
    description=DESCRIPTION,
    author=AUTHOR,
    author_email=EMAIL,
    url=URL,
    python_requires=REQUIRES_PYTHON,
    packages=["asnlp", "asnlp.common_utils"],
    install_requires=REQUIRED,
    extras_require=EXTRAS,
    include_package_data=True,
    license=""
)

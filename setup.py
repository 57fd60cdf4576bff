#!/usr/bin/env python

from setuptools import setup

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name="itunes-receipt",
    version="1.0.0",
    description="Parse and interpret App Store verifyReceipt responses",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    keywords="iap appstore itunes receipt django",
    author="Educreations Engineering",
    author_email="engineering@educreations.com",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=["itunes_receipt"],
    package_dir={"itunes_receipt": "itunes_receipt"},
    install_requires=[
        "Django>=2.2",
        "pytz",
    ],
    extras_require={"test": ["pytest>=7", "pytest-django", "flake8"]},
)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# vim: ai ts=4 sts=4 et sw=4 nu

import pathlib
import subprocess
import sys

from setuptools import find_packages, setup

root_dir = pathlib.Path(__file__).parent


def read(*names, **kwargs):
    with open(root_dir.joinpath(*names), "r") as fh:
        return fh.read()


def get_version():
    return subprocess.run(
        [
            sys.executable,
            "-c",
            "import sys; "
            "from system_timezone.__about__ import __version__; "
            "print(__version__, file=sys.stdout, flush=True)",
        ],
        env={"PYTHONPATH": str(root_dir.joinpath("src"))},
        text=True,
        capture_output=True,
    ).stdout.strip()


setup(
    name="system-timezone",
    version=get_version(),
    description="Report or set a host's system timezone via /etc/localtime",
    long_description=read("README.md"),
    long_description_content_type="text/markdown; charset=UTF-8; variant=GFM",
    keywords="timezone zoneinfo localtime",
    license="GPLv3+",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=["attrs>=22.2.0"],
    extras_require={"test": ["pytest>=7.0"]},
    entry_points={
        "console_scripts": [
            "system-timezone=system_timezone.timezone:entrypoint",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
    ],
    python_requires=">=3.9",
)

#  -*- coding: utf-8 -*-
"""
Setuptools script for the DLNAInfo project.
"""

import os
from textwrap import fill, dedent

from setuptools import setup, find_packages


def required(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as req_file:
        return [line for line in req_file.read().split('\n') if line.strip()]


setup(
    name="DLNAInfo",
    version="0.1.0",
    packages=find_packages(
        exclude=[
            "*.tests",
            "*.tests.*",
            "tests.*",
            "tests",
        ]
    ),
    scripts=[],
    include_package_data=True,
    install_requires=required('requirements.txt'),
    extras_require={
        'test': ['pytest', 'mock'],
    },
    entry_points={
        'console_scripts': [
            'dlnainfo = dlnainfo.__main__:main',
        ],
    },
    python_requires='>=3.7',
    zip_safe=False,
    description=fill(dedent("""\
        Report the ProtocolInfo and ConnectionIDs of the DLNA Media Renderers
        on the local network.
    """)),
    classifiers=[
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Topic :: Communications",
        "Topic :: Multimedia :: Video",
        "Topic :: System :: Networking"
    ],
    license="MIT",
    keywords="upnp dlna ssdp",
)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from setuptools import setup, find_packages
from codecs import open
from os import path

here = path.abspath(path.dirname(__file__))

# Get the long description from the README file
with open(path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='asicet',
    version=__import__('asicet').__version__,
    description='Upgrade XAdES-BES signatures in ASiC-E containers to XAdES-T with an RFC 3161 timestamp.',
    long_description=long_description,
    long_description_content_type='text/x-rst',
    author='asicet contributors',
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Operating System :: OS Independent',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Topic :: Security :: Cryptography',
        'Topic :: Office/Business',
    ],
    keywords='asic asice xades xades-t etsi rfc3161 timestamp tsa asn1',
    packages=find_packages(exclude=['examples', 'tests']),
    include_package_data=True,
    platforms=["all"],
    python_requires='>=3.6',
    install_requires=['lxml', 'asn1crypto', 'requests', 'attrs'],
    extras_require={'test': ['pytest']},
    test_suite="tests",
)

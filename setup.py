#!/usr/bin/env python3

import os
import re
from setuptools import setup

# Utility function to read the README file.
# Used for the long_description.


def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()


def find_version(source):
    version_file = read(source)
    version_match = re.search(r"^__VERSION__ = ['\"]([^'\"]*)['\"]", version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


NAME = 'stgcon'

setup(
    version=find_version('stgcon/__init__.py'),
    name=NAME,
    description='An interactive console for StGit patch stacks',
    packages=['stgcon'],
    license='GPLv2+',
    long_description=read('README.rst'),
    long_description_content_type='text/x-rst',
    keywords=['git', 'stgit', 'patches', 'patch stack'],
    install_requires=[
        'rich>=13.0,<15.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    python_requires='>=3.9',
    entry_points={
        'console_scripts': [
            'stgcon=stgcon.command:cmd'
        ],
    },
)

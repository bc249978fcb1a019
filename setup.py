#!/usr/bin/env python3

from setuptools import setup, find_packages

setup(
    name='edmlive-catalog',
    version='1.0.0',
    description='EDM Liveset catalog scraper - paginated liveset listings, search and track details',
    author='EDM Live Catalog',
    packages=find_packages(exclude=['tests', 'tests.*']),
    entry_points={
        'console_scripts': [
            'edmlive=edmlive.cli:main',
        ],
    },
    install_requires=[
        # Core dependencies
        'aiohttp>=3.8.0',
        'beautifulsoup4>=4.11.0',
        'lxml>=4.9.0',
        'python-dateutil>=2.8.0',

        # Retry and resilience
        'tenacity>=8.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'pytest-asyncio>=0.21.0',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: Multimedia :: Sound/Audio',
        'Topic :: Internet :: WWW/HTTP',
    ],
    python_requires='>=3.8',
)

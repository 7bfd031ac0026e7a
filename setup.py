import re

from setuptools import find_packages, setup

DESCRIPTION = 'Selector resolution for coordinate-labelled ' \
              'N-dimensional array axes.'

with open('README.md') as f:
    LONG_DESCRIPTION = f.read()

with open('src/lookuparrays/_version.py') as f:
    VERSION = re.search(r'version = "(.*)"', f.read()).group(1)

dependencies = [
    'numpy>=1.25',
    'donfig>=0.8',
]

setup(
    name='lookuparrays',
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type='text/markdown',
    extras_require={
        'test': [
            'pytest',
            'hypothesis',
        ],
    },
    python_requires='>=3.11, <4',
    install_requires=dependencies,
    package_dir={'': 'src'},
    packages=find_packages('src'),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Information Technology',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Topic :: Scientific/Engineering',
        'Operating System :: Unix',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
    ],
    license='MIT',
)

"""
Setup file for GBPDN
"""

import os

from setuptools import setup, find_packages

# Get version and release info, which is all stored in gbpdn/info.py
info = {}
with open(os.path.join('gbpdn', 'info.py')) as fobj:
    exec(fobj.read(), info)

requires = ['numpy>=%s' % info['NUMPY_MIN_VERSION'],
            'scipy>=%s' % info['SCIPY_MIN_VERSION']]

if __name__ == '__main__':

    setup(name=info['NAME'],
          maintainer=info['MAINTAINER'],
          maintainer_email=info['MAINTAINER_EMAIL'],
          description=info['DESCRIPTION'],
          long_description=info['LONG_DESCRIPTION'],
          url=info['URL'],
          download_url=info['DOWNLOAD_URL'],
          license=info['LICENSE'],
          classifiers=info['CLASSIFIERS'],
          author=info['AUTHOR'],
          author_email=info['AUTHOR_EMAIL'],
          platforms=info['PLATFORMS'],
          version=info['VERSION'],
          packages=find_packages(exclude=['tests', 'tests.*']),
          python_requires='>=3.8',
          install_requires=requires,
          extras_require={'test': ['pytest'],
                          'examples': ['matplotlib']},
          )

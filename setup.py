from setuptools import setup, find_packages


# Get the long description from the README file
#def readme():
#    with open('README.rst') as f:
#        return f.read()

setup(name='varifoldlib',
      version='0.1.0',
      description='Kernel-weighted varifold curvature estimation on surface meshes',
      author='Stefan Endres, Lutz Mädler',
      author_email='s.endres@iwt-uni-bremen.de',
      license='MIT',
      packages=find_packages(include=['varifoldlib', 'varifoldlib.*']),
      install_requires=[
          'scipy',
          'numpy',
           ],
      extras_require={
          'vis': ['matplotlib', 'polyscope'],
          'test': ['pytest', 'matplotlib'],
      },
      entry_points={
          'console_scripts': ['varifoldlib=varifoldlib.__main__:main'],
      },
      python_requires='>=3.9',
      #long_description=readme(),
      long_description='None',
      long_description_content_type='text/markdown',
      keywords='curvature varifold mesh',
      classifiers=[
          # How mature is this project? Common values are
          #   3 - Alpha
          #   4 - Beta
          #   5 - Production/Stable
          'Development Status :: 3 - Alpha',

          # Indicate who your project is intended for
          'Intended Audience :: Science/Research',
          'Intended Audience :: Developers',
          'Topic :: Scientific/Engineering',
          'Topic :: Scientific/Engineering :: Mathematics',

          # Pick your license as you wish (should match "license" above)
          'License :: OSI Approved :: MIT License',

          'Programming Language :: Python :: 3.9',
      ],
      zip_safe=False)

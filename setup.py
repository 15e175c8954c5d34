from setuptools import setup
import os


def main():
    this_directory = os.path.abspath(os.path.dirname(__file__))
    with open(os.path.join(this_directory, 'README.rst'), 'r') as f:
        long_description = f.read()

    setup(name='pycrn',
          version='0.1.0',
          description='Chemical reaction network compiler for ODE, SDE and '
                      'jump models',
          long_description=long_description,
          long_description_content_type='text/x-rst',
          packages=['pycrn', 'pycrn.testing', 'pycrn.tests'],
          python_requires='>=3.6',
          install_requires=['numpy', 'scipy>=1.1', 'sympy>=1.6', 'networkx',
                            'ply'],
          extras_require={'test': ['pytest']},
          keywords=['chemical', 'reaction', 'network', 'kinetics',
                    'stochastic'],
          classifiers=[
            'Development Status :: 3 - Alpha',
            'Intended Audience :: Science/Research',
            'Operating System :: OS Independent',
            'Programming Language :: Python :: 3',
            'Topic :: Scientific/Engineering :: Chemistry',
            'Topic :: Scientific/Engineering :: Mathematics',
            ],
          )


if __name__ == '__main__':
    main()

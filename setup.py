from setuptools import setup, find_packages

with open('README.md', 'r') as readme:
    long_description = readme.read()

setup(
    name='bspline-edit', 
    version='1.0.0', 
    description='Evaluation and knot manipulation engine for interactive 2D B-spline curve editing.', 
    long_description=long_description, 
    long_description_content_type='text/markdown', 
    packages=find_packages(exclude=['tests']), 
    package_data={'bspline_edit': ['data/*.json']}, 
    install_requires=['numpy', 'numba', 'scipy', 'matplotlib'], 
    extras_require={'test': ['pytest']}, 
    python_requires='>=3.9', 
    classifiers=['Programming Language :: Python :: 3', 
                 'Operating System :: OS Independent'], 
    
)

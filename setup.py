from setuptools import setup, find_packages

setup(
    name='oobforest',
    version='1.0',
    packages=find_packages(exclude=['tests', 'tests.*', 'experiments']),
    py_modules=[
        'bootstrapping',
        'feature_sampling',
        'forest_builder',
        'impurity',
        'oob_evaluation',
        'permutation_importance',
        'predictor',
        'sample_data',
        'split_search',
        'tree_builder',
    ],
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'joblib',
    ],
    extras_require={
        'test': ['pytest'],
    },
    description='Random forest with out-of-bag error curves and feature importance',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)

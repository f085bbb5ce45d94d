from setuptools import setup

setup(
    name='cartforest',
    version='1.0',
    py_modules=[
        'dataset_checks',
        'decision_tree',
        'gini',
        'gini_split_search',
        'random_forest',
        'tree_errors',
        'tree_visualizer',
    ],
    description='CART decision trees and a majority-vote forest built on NumPy',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    python_requires='>=3.10',
    install_requires=['numpy'],
    extras_require={
        'test': ['pytest'],
        'experiments': ['scikit-learn'],
    },
)

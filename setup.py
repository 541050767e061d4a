from setuptools import setup, find_packages

with open('README.md') as f:
    readme = f.read()

with open('requirements.txt') as f:
    reqs = f.read()

setup(
    name='basketminer',
    version='1.0',
    description='Frequent itemsets and association rules from basket data with iterative map/reduce jobs',
    long_description=readme,
    long_description_content_type='text/markdown',
    license='MIT',
    python_requires='>=3.8',
    packages=find_packages(exclude=('test', 'test.*', 'data')),
    install_requires=reqs.strip().split('\n'),
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['basketminer=basketminer.mineRules:main'],
    },
)

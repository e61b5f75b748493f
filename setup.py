from setuptools import setup, find_packages

setup(
    name='ws_auction',
    version='0.1',
    description='Auction algorithm with epsilon-scaling for Wasserstein distances between point sets implemented in PyTorch',
    packages=find_packages(include=['ws_auction', 'ws_auction.*']),
    python_requires='>=3.7',
    install_requires=['torch'],
    extras_require={'test': ['pytest']},
)

# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="zkfs",
    version="0.1.0",
    description="Filesystem-like command line client for ZooKeeper (ls, tree, cat, write, create, rm)",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["zkfs", "zkfs.*"]),
    python_requires=">=3.9",
    install_requires=[
        "kazoo>=2.9",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'zkfs=zkfs.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

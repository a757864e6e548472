# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="annocheck",
    version="0.1.0",
    description="Annotation-driven verification of static-analysis results on JavaScript fixtures",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["annocheck", "annocheck.*"]),
    python_requires=">=3.9",
    install_requires=[
        "tree-sitter>=0.22",
        "tree-sitter-javascript>=0.21",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'annocheck=annocheck.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

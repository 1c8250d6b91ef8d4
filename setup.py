# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="zap-embed",
    version="0.1.0",
    description="Embed resource directories into generated Python modules",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["zap*", "zapped*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'zap=zap.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

from setuptools import setup, find_packages

setup(
    name="jlscheck",
    version="0.1.0",
    description="JPEG-LS round-trip conformance checks for PGM/PPM reference images",
    packages=find_packages(include=["jlscheck", "jlscheck.*"]),
    install_requires=[
        "numpy>=1.21.0",
        "imagecodecs>=2022.2.22",
        "pyjpegls>=1.2.0",
        "click>=8.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "Pillow>=9.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "jlscheck=jlscheck.cli:main",
        ],
    },
    python_requires=">=3.8",
)

from setuptools import setup, find_packages

setup(
    name="retina-spiking-output",
    version="0.1.0",
    description="Retina ganglion cell spiking output: activation frames to spike times",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["run_all"],
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "scipy",
        "matplotlib",
    ],
    extras_require={
        "hdf5": [
            "h5py",
        ],
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "retina-spikes=run_all:main",
        ],
    },
)

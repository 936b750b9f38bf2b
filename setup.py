from setuptools import setup, find_packages

setup(
    name="connect4ai",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "gymnasium",
        "torch",  # PyTorch for the Q-network
        "filelock",  # Guards the job registry files
    ],
    extras_require={
        "test": ["pytest"],
    },
)

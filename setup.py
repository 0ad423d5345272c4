# setup.py
from setuptools import setup, find_packages

setup(
    name="price_chart",
    version="0.1.0",
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    install_requires=[
        "pandas",
        "numpy",
        "pyqtgraph",
        "PyQt6",
        "python-dotenv",
        "pytz",
        "requests",
        "websockets",
    ],
    extras_require={
        "test": ["pytest"],
    },
    py_modules=["run_price_chart"],
)

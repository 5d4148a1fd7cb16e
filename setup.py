from setuptools import setup, find_packages

setup(
    name="ts-superlearner",
    version="0.1.0",
    description="Cross-validated Super Learner ensembles for time-series data",
    author="ts_superlearner Team",
    packages=find_packages(include=["ts_superlearner", "ts_superlearner.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.23.0",
        "pandas>=1.5.0",
        "scipy>=1.10.0",
        "scikit-learn>=1.1.0",
        "statsmodels>=0.13.0",
        "joblib>=1.2.0",
        "psutil>=5.9.0",
        "click>=8.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-mock>=3.14.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "ts-superlearner=ts_superlearner.cli:cli",
        ]
    },
)

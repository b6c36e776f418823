from setuptools import setup, find_packages

setup(
    name="insight",
    version="0.1.0",
    packages=find_packages(include=["insight", "insight.*"]),
    package_data={"insight": ["schema.sql"]},
    install_requires=[
        "flask",
        "werkzeug",
        "prometheus_client",
        "python-json-logger",
        "waitress",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["insight=insight.main:main"],
    },
    python_requires=">=3.9",
)

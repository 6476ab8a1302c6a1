from setuptools import setup, find_packages

setup(
    name="finplan-reminders",
    version="0.1.0",
    packages=find_packages(include=["finplan", "finplan.*"]),
    install_requires=[
        "sqlalchemy>=2.0",
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
        "celery",
        "prometheus-client",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
)

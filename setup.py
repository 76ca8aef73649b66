from setuptools import setup, find_packages


setup(
    name="catch",
    version="0.1",
    packages=find_packages(include=["catch", "catch.*"]),
    description="Fetch, ping, and a plain-text append-only store for named byte payloads.",
    install_requires=[
        "httpx>=0.27",
    ],
    entry_points={
        "console_scripts": [
            "catch=catch.cli:main",
        ]
    },
)

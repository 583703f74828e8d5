"""
Workdeck Planner setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="workdeck-planner",
    version="1.0.0",
    description="Workdeck Resource Planner — team capacity dashboard for Workdeck",
    packages=find_packages(include=["workdeck_planner", "workdeck_planner.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "workdeck-planner=workdeck_planner.cli:main",
        ],
    },
    install_requires=[
        "reflex>=0.6.0",
        "pydantic>=2.5",
        "cryptography>=42.0",
        "pyyaml>=6.0",
        "httpx>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
)

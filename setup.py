"""Setup configuration for reposcan"""

from setuptools import setup, find_packages

setup(
    name="reposcan",
    version="1.0.0",
    description=(
        "CLI tool for GitHub pull request pulse metrics: open, merged and "
        "churned pull requests per two-week pulse, normalized for team and PR size."
    ),
    author="reposcan Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "reposcan=reposcan.main:main",
        ],
    },
)

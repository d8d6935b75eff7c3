"""Setup configuration for jira_sprint_helper"""

from setuptools import setup, find_packages

setup(
    name="jira-sprint-helper",
    version="0.1.0",
    description=(
        "CLI tool to list Jira boards, sprints and issues and to report "
        "and update sprint time-tracking estimates per assignee."
    ),
    author="Jira Sprint Helper Contributors",
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
            "jira-sprint-helper=jira_sprint_helper.main:main",
        ],
    },
)

"""Setup script for bedrock_agent package."""

from setuptools import setup, find_namespace_packages

setup(
    name="bedrock-agent",
    version="0.1.0",
    description="SigV4-signed chat-completions client and tool-calling agent loop for Amazon Bedrock",
    packages=find_namespace_packages(include=["bedrock_agent", "bedrock_agent.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml>=6.0",
        "httpx>=0.25.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "bedrock-agent=bedrock_agent.main:main",
        ],
    },
    package_data={
        "bedrock_agent.config": ["default_config.yaml"],
    },
)

from setuptools import setup, find_packages

setup(
    name="relaygraph",
    version="0.1.0",
    packages=find_packages(where="src", exclude=["tests", "tests.*"]),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2",
        "mirascope[openai]>=1,<2",
        "tenacity",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    python_requires=">=3.9",
    # Add metadata for PyPI
    author="kenneth cavanagh",
    author_email="ken@agency42.com",
    description="workflow orchestration for LLM agents: state graphs and multi-agent teams",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    url="https://github.com/k3nnethfrancis/relaygraph",
)

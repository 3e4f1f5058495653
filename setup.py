from setuptools import setup, find_packages

setup(
    name="omx-mcp",
    version="0.1.0",
    description="MCP server for asynchronous Claude Code delegation and workflow memory",
    author="omx Team",
    packages=find_packages(include=["config*", "omx_tools*", "server*", "utils*"]),
    install_requires=[
        "mcp>=1.2.0,<2",
        "pydantic>=2.0.0",
        "psutil>=5.9.0",
        "click>=8.0.0",
        "starlette>=0.27.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
            "black>=22.0.0",
            "isort>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "omx-mcp=server.main:main",
        ],
    },
    python_requires=">=3.11",
)

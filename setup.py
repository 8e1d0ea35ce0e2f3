from setuptools import setup, find_packages

setup(
    name="amountex",
    version="0.1.0",
    description="Monetary amount extraction from bill text",
    packages=find_packages(include=['amountex', 'amountex.*']),
    package_data={
        'amountex': ['prompts/*.yaml'],
        'amountex.config': ['*.yaml'],
    },
    include_package_data=True,
    python_requires='>=3.9',
    install_requires=[
        'pydantic>=2.0',
        'pyyaml',
        'jinja2',
        'httpx',
        'openai>=1.0',
        'google-generativeai',
        'click',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    entry_points={
        'console_scripts': [
            'amountex=amountex.cli:cli',
        ],
    },
)

from setuptools import setup, find_packages

setup(
    name="record-validator",
    version="0.1.0",
    description="Declarative validation of records, single values and uploads with localized messages",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        'record_validator': ['local-config.yaml', 'messages.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'pyyaml>=6.0',
        'jsonschema>=4.17.0',
        'requests>=2.28.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'record-validator-rpc=record_validator.jsonrpc_server:main',
        ],
    },
    python_requires='>=3.9',
)

from setuptools import setup, find_packages
setup(
    name="dubai_unit_finder",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "httpx>=0.27",
        "parsel>=1.9",
        "SQLAlchemy>=2.0",
        "psycopg[binary]>=3.1",
        "fastapi>=0.110",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest>=7",
        ],
        "server": [
            "uvicorn>=0.29",
        ],
    },
    entry_points={
        'console_scripts': [
            'dubai_unit_finder=dubai_unit_finder.__main__:main'
        ]
    }
)

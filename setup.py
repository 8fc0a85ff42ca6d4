from setuptools import setup, find_packages

setup(
    name="skillforge",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*", "alembic", "alembic.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt<4.1",  # passlib 1.7 breaks on newer bcrypt releases
        "pydantic[email]>=2",
        "pydantic-settings",
        "python-dotenv",
        "alembic"
    ],
    extras_require={
        "test": ["pytest"],
    },
)

from setuptools import setup, find_packages

setup(
       name="world-cache",
       version="0.1.0",
       description="Denormalize the world dataset into Redis and compare read latency with the database",
       author="World Cache Developers",
       author_email="world-cache@example.com",
       packages=find_packages(exclude=["tests", "examples"]),
       install_requires=[
           "pydantic>=2.5.0",
           "click>=8.1.0",
           "SQLAlchemy>=2.0.0",
           "redis>=5.0.0",
           "PyMySQL>=1.1.0",
       ],
       extras_require={
           "dev": ["pytest>=7.4.0", "fakeredis>=2.20.0", "black>=23.0.0", "mypy>=1.7.0"],
       },
       python_requires=">=3.9",
       entry_points={
           "console_scripts": [
               "world-cache=world_cache.cli:main",
           ],
       },
   )

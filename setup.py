from setuptools import find_namespace_packages, setup


setup(
    name="stencil",
    version="0.4.0",
    description="Template instantiation engine: copy, transform and commit file trees",
    author="GAHEOS",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["stencil*"]),
    install_requires=[],
    extras_require={"test": ["pytest"]},
)

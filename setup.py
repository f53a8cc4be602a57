from setuptools import setup
import os

VERSION = "0.1"


def get_long_description():
    with open(
        os.path.join(os.path.dirname(os.path.abspath(__file__)), "README.md"),
        encoding="utf8",
    ) as fp:
        return fp.read()


setup(
    name="datasette-sitesearch",
    description="Crawls websites into a lemma index and searches them from Datasette.",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    license="Apache License, Version 2.0",
    classifiers=[
        "Framework :: Datasette",
        "License :: OSI Approved :: Apache Software License"
    ],
    version=VERSION,
    packages=["datasette_sitesearch", "datasette_sitesearch.plugins"],
    entry_points={"datasette": ["sitesearch = datasette_sitesearch"]},
    install_requires=["datasette>=0.64,<1.0", "selectolax<1.0", "pluggy", "httpx", "more-itertools", "markupsafe", "pymorphy3"],
    extras_require={"test": ["wheel", "pytest", "pytest-asyncio", "pytest-watch", "coverage"]},
    python_requires=">=3.8",
)

import setuptools
import sys
import os
import re


if sys.version_info < (3, 8):
    sys.exit('Sorry, Python < 3.8 is not supported')

with open("README.md", "r") as fh:
    long_description = fh.read()

# Read metadata from metadata file
metadata_file = open(os.path.join(os.path.dirname(__file__), 'replicate_client', '_metadata.py')).read()
metadata = dict(re.findall("__([a-z]+)__ = '([^']+)'", metadata_file))


def read_requirements(fi: str):
    def proc_req(r):
        r = r.strip()
        if len(r) == 0 or any(map(lambda x: r.startswith(x), ["#", ".", "-"])):
            return None
        return r

    with open(fi, "rt") as rt:
        return list(filter(None, map(proc_req, rt.read().splitlines())))


requires = read_requirements("requirements.txt")

setuptools.setup(
    name="replicate-client",
    version=metadata['version'],
    description="Asynchronous Python client for running and streaming models on the Replicate API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=requires,
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    python_requires=">=3.8",
)

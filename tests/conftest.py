import os

import pytest

from xpath_reader.context import Context
from xpath_reader.reader import Reader

DC = "http://purl.org/dc/elements/1.1/"


def get_testdata_dir():
    file_path = os.path.realpath(__file__)
    return os.path.normpath(os.path.join(file_path, "../testdata"))


@pytest.fixture(scope="module")
def testdata_dir():
    return get_testdata_dir()


def get_context():
    context = Context()
    context.set_namespace("dc", DC)
    return context


@pytest.fixture(scope="function")
def context():
    """Fresh context for each test function to avoid state leakage."""
    return get_context()


@pytest.fixture(scope="function")
def reader(context):
    return Reader.from_file(os.path.join(get_testdata_dir(), "books.xml"), context)

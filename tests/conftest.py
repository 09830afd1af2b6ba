import pytest

from arborlog import CategoryService, use_service


@pytest.fixture(scope="function")
def service():
    """
    Function-scoped category service installed as the process-wide current one.
    Categories created without an explicit service register here.
    """
    fresh = CategoryService()
    previous = use_service(fresh)
    yield fresh
    fresh.clear()
    use_service(previous)

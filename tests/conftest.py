import pytest

from tidyup.utils.logger import get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Rebind the shared logger to the current (captured) stderr"""
    setup_logging()
    yield
    get_logger().close()


@pytest.fixture
def messy_dir(tmp_path):
    """A directory with a mix of mapped, unmapped and extensionless files"""
    root = tmp_path / "desktop"
    root.mkdir()
    for name in ("a.png", "b.txt", "c.PY", "d.cpp", "noext", "photo.jpeg"):
        (root / name).write_text(name)
    return root

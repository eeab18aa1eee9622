import pytest

from campusmap.editor import MapEditor

from .fakes import MemoryStore, make_viewport


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def viewport():
    return make_viewport()


@pytest.fixture
def editor(store, viewport):
    """뷰포트가 잡힌 상태의 에디터 (컬렉션은 아직 비어 있음)."""
    ed = MapEditor(store, snap_px=10)
    ed.viewport = viewport
    ed.load_all()
    return ed

# campusmap/session.py
"""
에디터 상태를 Django 세션에 보관/복원한다.

같은 세션의 에디터 요청은 한 번에 하나만 처리한다.
(빠른 더블 클릭으로 보행로가 두 번 저장되는 것을 막기 위한 잠금)
"""
import logging
from contextlib import contextmanager

from django.core.cache import cache

from .editor import MapEditor
from .store import DjangoGeoEntityStore

logger = logging.getLogger(__name__)

SESSION_KEY = "campusmap.editor"
LOCK_TIMEOUT = 30


class EditorBusy(Exception):
    """같은 세션의 다른 에디터 요청이 아직 처리 중."""


def load_editor(request, store=None) -> MapEditor:
    store = store or DjangoGeoEntityStore()
    try:
        return MapEditor(store, request.session.get(SESSION_KEY))
    except (KeyError, TypeError, ValueError) as e:
        # 깨진 세션 상태는 버리고 새로 시작한다.
        logger.warning("discarding invalid editor state: %s", e)
        return MapEditor(store)


def save_editor(request, editor: MapEditor) -> None:
    request.session[SESSION_KEY] = editor.to_state()


@contextmanager
def editor_session(request, store=None, load=True):
    """
    with editor_session(request) as editor:
        editor.handle_map_click(...)

    - 진입 시 세션 잠금 + 에디터 복원 + 컬렉션 로딩 (load=False 면 로딩 생략)
    - 정상 종료 시에만 상태를 세션에 다시 저장한다
    """
    if not request.session.session_key:
        request.session.save()
    lock_key = f"campusmap:editor-lock:{request.session.session_key}"
    if not cache.add(lock_key, 1, LOCK_TIMEOUT):
        raise EditorBusy(request.session.session_key)
    try:
        editor = load_editor(request, store)
        if load:
            editor.load_all()
        yield editor
        save_editor(request, editor)
    finally:
        cache.delete(lock_key)

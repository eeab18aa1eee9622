# campusmap/views.py
"""
캠퍼스 지도 관리 콘솔용 Django 뷰들.

크게 3가지 역할:
1) 엔티티 컬렉션 API (목록 조회, 생성, 상세 조회/수정/삭제) - 편집 모달/건물 폼용
2) 지도 에디터 API (모드, 클릭, 취소, 미니 폼 ...) - 상태는 세션에 보관
3) 헬스 체크
"""
import json
import logging

from django.http import HttpResponseNotAllowed, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from . import kinds
from .conf import map_setting
from .drafts import DraftError
from .editor import NoDraft, UnknownOverlay
from .geo import parse_latlng
from .modes import UnknownMode
from .session import EditorBusy, editor_session
from .store import DjangoGeoEntityStore, InvalidRow, NotFound, StoreError

logger = logging.getLogger(__name__)


def ping(request):
    """서버 작동 확인용. 응답: {"ok": true}"""
    return JsonResponse({"ok": True})


# ----- 내부 헬퍼 함수 -----

def _read_json(request) -> dict:
    """요청 본문(JSON 객체)을 읽는다. 비어 있으면 {}, 깨져 있으면 ValueError."""
    raw = request.body.decode("utf-8") if request.body else ""
    if not raw.strip():
        return {}
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("request body must be a JSON object")
    return payload


def _error(message, status=400, **extra):
    body = {"error": str(message)}
    body.update(extra)
    return JsonResponse(body, status=status)


def _normalize_building(payload: dict) -> dict:
    """
    건물 폼(addBuilding 위치 선택 후) 입력 정리.

    - name 필수 (앞뒤 공백 제거)
    - total_floors 는 1 이상 정수
    - latitude / longitude 는 유한한 좌표
    - building_code / description 은 빈 문자열이면 null
    - state 기본값 ENABLED
    """
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("name is required")
    ll = parse_latlng(payload.get("latitude"), payload.get("longitude"))
    try:
        floors = int(payload.get("total_floors", 1))
    except (TypeError, ValueError):
        raise ValueError("total_floors must be an integer")
    if floors < 1:
        raise ValueError("total_floors must be at least 1")
    return {
        "name": name,
        "building_code": (payload.get("building_code") or "").strip() or None,
        "description": (payload.get("description") or "").strip() or None,
        "latitude": ll.lat,
        "longitude": ll.lng,
        "total_floors": floors,
        "state": payload.get("state") or "ENABLED",
    }


# ----- 컬렉션 목록 & 생성 -----

@csrf_exempt
def collection(request, name: str):
    """
    /api/<collection>/ 엔드포인트. (buildings, footways, entrances, parkings, landmarks)

    - GET  : 전체 목록
    - POST : 한 행 생성 (건물은 _normalize_building 을 거친다)
    """
    kind = kinds.kind_for_collection(name)
    if kind is None:
        return _error("unknown collection", status=404)
    store = DjangoGeoEntityStore()

    if request.method == "GET":
        try:
            rows = store.load(kind)
        except StoreError as e:
            logger.error("list %s failed: %s", name, e)
            return _error("query failed", status=500)
        # safe=False: 리스트 형태도 그대로 반환
        return JsonResponse(rows, safe=False)

    if request.method == "POST":
        try:
            payload = _read_json(request)
            if kind == kinds.BUILDING:
                payload = _normalize_building(payload)
        except ValueError as e:
            return _error(e)
        try:
            obj = store.insert(kind, payload)
        except InvalidRow as e:
            return _error(e, errors=e.errors)
        except StoreError as e:
            logger.error("insert %s failed: %s", name, e)
            return _error("insert failed", status=500)
        return JsonResponse(obj, status=201)

    return HttpResponseNotAllowed(["GET", "POST"])


# ----- 특정 엔티티 조회/수정/삭제 -----

@csrf_exempt
def entity(request, name: str, pk: int):
    """
    /api/<collection>/<pk>/ 엔드포인트. (편집 모달)

    - GET          : 단일 조회
    - PUT / PATCH  : 부분 갱신 (보행로 geom 변경은 거부)
    - DELETE       : 삭제
    """
    kind = kinds.kind_for_collection(name)
    if kind is None:
        return _error("unknown collection", status=404)
    store = DjangoGeoEntityStore()

    try:
        if request.method == "GET":
            return JsonResponse(store.get(kind, pk))

        if request.method in ["PUT", "PATCH"]:
            try:
                payload = _read_json(request)
            except ValueError as e:
                return _error(e)
            return JsonResponse(store.update(kind, pk, payload))

        if request.method == "DELETE":
            store.delete(kind, pk)
            return JsonResponse({"ok": True})
    except NotFound:
        return _error("not found", status=404)
    except InvalidRow as e:
        return _error(e, errors=e.errors)
    except StoreError as e:
        logger.error("%s %s %s failed: %s", request.method, name, pk, e)
        return _error("store failure", status=500)

    return HttpResponseNotAllowed(["GET", "PUT", "PATCH", "DELETE"])


# ----- 지도 에디터 -----

def _run_editor(request, action, load=True):
    """
    세션 에디터를 열고 action(editor) 을 실행한 뒤 스냅샷을 반환한다.

    - 입력 오류(ValueError 계열)  → 400
    - 없는 오버레이 핸들          → 404
    - 초안 없음 / 다른 요청 처리 중 → 409
    """
    try:
        with editor_session(request, load=load) as editor:
            action(editor)
            return JsonResponse(editor.snapshot())
    except EditorBusy:
        return _error("editor busy", status=409)
    except UnknownOverlay as e:
        return _error(f"unknown overlay: {e}", status=404)
    except NoDraft as e:
        return _error(e, status=409)
    except (UnknownMode, DraftError, ValueError) as e:
        return _error(e)


def editor_state(request):
    """
    GET /api/editor/ : 현재 에디터 스냅샷.

    ?reset=1 이면 오버레이를 처음부터 다시 만들어 보낸다 (페이지 로드 시).
    """
    if request.method != "GET":
        return HttpResponseNotAllowed(["GET"])
    if request.GET.get("reset"):
        response = _run_editor(request, lambda editor: editor.rebuild(), load=False)
    else:
        response = _run_editor(request, lambda editor: None)
    return response


def editor_config(request):
    """GET /api/editor/config/ : 지도 초기 중심/줌, 스냅 반경."""
    lat, lng = map_setting("CENTER")
    return JsonResponse({
        "center": {"lat": lat, "lng": lng},
        "zoom": map_setting("ZOOM"),
        "snap_px": map_setting("SNAP_PX"),
        "tile_size": map_setting("TILE_SIZE"),
    })


def _editor_post(request, action):
    if request.method != "POST":
        return HttpResponseNotAllowed(["POST"])
    try:
        payload = _read_json(request)
    except ValueError as e:
        return _error(e)
    return _run_editor(request, lambda editor: action(editor, payload))


@csrf_exempt
def editor_mode(request):
    """POST {"mode": "idle|addBuilding|footwayAB|entrance|parking|landmark"}"""
    return _editor_post(request, lambda editor, p: editor.set_mode(p.get("mode")))


@csrf_exempt
def editor_selection(request):
    """POST {"footway_transit"?, "entrance_type"?, "parking_type"?, "landmark_type"?}"""
    return _editor_post(request, lambda editor, p: editor.set_selection(p))


@csrf_exempt
def editor_viewport(request):
    """POST {"center": {"lat", "lng"}, "zoom", "width", "height"}"""
    return _editor_post(request, lambda editor, p: editor.set_viewport(p))


@csrf_exempt
def editor_click(request):
    """POST {"lat", "lng"} : 지도 빈 곳 클릭."""
    def action(editor, p):
        editor.handle_map_click(parse_latlng(p.get("lat"), p.get("lng")))
    return _editor_post(request, action)


@csrf_exempt
def editor_overlay(request):
    """POST {"handle"} : 마커/폴리라인 클릭."""
    def action(editor, p):
        handle = p.get("handle")
        if not isinstance(handle, str) or not handle:
            raise ValueError("handle is required")
        editor.click_overlay(handle)
    return _editor_post(request, action)


@csrf_exempt
def editor_cancel(request):
    """POST : Escape 키 / 취소 버튼. 취소할 것이 없으면 아무 일도 없다."""
    return _editor_post(request, lambda editor, p: editor.cancel())


@csrf_exempt
def editor_modal(request):
    """POST {"open": bool} : 호스트 화면의 모달 열림 여부."""
    def action(editor, p):
        is_open = p.get("open")
        if not isinstance(is_open, bool):
            raise ValueError("open must be a boolean")
        editor.set_modal_open(is_open)
    return _editor_post(request, action)


@csrf_exempt
def editor_draft(request):
    """
    /api/editor/draft/ : 미니 폼.

    - PATCH  {"name"?, "building_id"?} : 값 변경
    - POST   : 저장
    - DELETE : 취소
    """
    if request.method == "PATCH":
        try:
            payload = _read_json(request)
        except ValueError as e:
            return _error(e)
        fields = {k: payload[k] for k in ("name", "building_id") if k in payload}
        return _run_editor(request, lambda editor: editor.update_draft(**fields))
    if request.method == "POST":
        return _run_editor(request, lambda editor: editor.submit_draft())
    if request.method == "DELETE":
        return _run_editor(request, lambda editor: editor.cancel_draft())
    return HttpResponseNotAllowed(["PATCH", "POST", "DELETE"])

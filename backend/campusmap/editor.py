# campusmap/editor.py
"""
지도 에디터 (Mode State Machine + 클릭 라우팅).

요청 하나 = 상태 전이 하나:
    1) 세션에서 상태(to_state)를 읽어 MapEditor 를 만든다
    2) load_all() 로 컬렉션을 읽고 레이어를 최신화한다
    3) set_mode / handle_map_click / click_overlay / cancel / submit_draft ... 중 하나 실행
    4) snapshot() 을 응답으로, to_state() 를 다시 세션에 저장

에디터가 직접 하는 저장은 "한 행 추가"뿐이다. 수정/삭제는 편집 모달(API)이 한다.
저장소 오류는 여기서 모두 잡아 알림(notice)으로 바꾼다. 예외가 뷰까지 새지 않는다.
"""
import logging

from . import kinds
from .conf import map_setting
from .drafts import PendingEntityForm, PendingDraft
from .geo import LatLng, line_geojson, nearest_building_id
from .layers import DRAFT_LAYER, LayerRenderer, OverlaySurface
from .modes import (AddBuilding, DrawFootway, Idle, PlacePoint, Selection,
                    UnknownMode, banner, mode_from_name, mode_from_state)
from .projection import Viewport
from .snapping import collect_vertices, snap
from .store import StoreError

logger = logging.getLogger(__name__)

KIND_LABELS = {
    kinds.BUILDING: "건물",
    kinds.FOOTWAY: "보행로",
    kinds.ENTRANCE: "출입구",
    kinds.PARKING: "주차장",
    kinds.LANDMARK: "랜드마크",
}

_MISSING = object()


class UnknownOverlay(LookupError):
    pass


class NoDraft(LookupError):
    pass


class MapEditor:

    def __init__(self, store, state: dict = None, snap_px: float = None):
        state = state or {}
        self.store = store
        self.mode = mode_from_state(state.get("mode"))
        self.selection = Selection.from_state(state.get("selection"))
        self.viewport = Viewport.from_dict(state["viewport"]) if state.get("viewport") else None
        self.modal_open = bool(state.get("modal_open"))
        self.surface = OverlaySurface(state.get("surface"))
        self.renderer = LayerRenderer(self.surface)
        self.snap_px = snap_px if snap_px is not None else map_setting("SNAP_PX")

        self.collections = {kind: [] for kind in kinds.KINDS}
        self.events = []
        self.notices = []

    # ----- 알림 / 이벤트 -----

    def notify(self, level: str, message: str) -> None:
        self.notices.append({"level": level, "message": message})

    def emit(self, event_type: str, **payload) -> None:
        event = {"type": event_type}
        event.update(payload)
        self.events.append(event)

    # ----- 데이터 로딩 / 렌더링 -----

    def refresh(self, kind: str) -> bool:
        """
        컬렉션 하나를 다시 읽고 레이어를 갱신한다.

        조회 실패 시 로그만 남기고 이전 렌더 결과를 그대로 둔다.
        """
        try:
            rows = self.store.load(kind)
        except StoreError as e:
            logger.warning("failed to load %s: %s", kind, e)
            return False
        self.collections[kind] = rows
        self.renderer.render_layer(kind, rows)
        return True

    def load_all(self) -> None:
        for kind in kinds.KINDS:
            self.refresh(kind)

    def rebuild(self) -> None:
        """
        오버레이를 처음부터 다시 만든다 (페이지 새로 고침 등).
        진행 중인 A/B 점 마커도 다시 그린다.

        이전 오버레이는 모두 remove 연산으로 내보내고, 핸들 번호는 이어서 쓴다.
        (같은 세션의 다른 탭이 옛 핸들을 들고 있어도 다른 엔티티를 가리키지 않게)
        """
        self.surface.clear()
        self.load_all()
        if isinstance(self.mode, DrawFootway):
            if self.mode.point_a:
                self.renderer.draw_draft_point("A", self.mode.point_a)
            if self.mode.point_b:
                self.renderer.draw_draft_point("B", self.mode.point_b)

    def vertices(self):
        return collect_vertices(self.collections[kinds.FOOTWAY])

    # ----- 모드 전환 -----

    def set_mode(self, name: str) -> None:
        """모드 교체. 완료되지 않은 A/B 그리기나 미니 폼 초안은 버려진다."""
        nxt = mode_from_name(name)
        self._clear_ab()
        self.mode = nxt
        if isinstance(nxt, DrawFootway):
            label = kinds.TRANSIT_LABELS[self.selection.footway_transit]
            self.notify("info", f"{label} 통로 그리기 (A→B): 꼭짓점이나 지도를 클릭하세요.")

    def set_selection(self, values: dict) -> None:
        self.selection.update(values)

    def set_viewport(self, data: dict) -> None:
        self.viewport = Viewport.from_dict(data)

    def reset_mode(self) -> None:
        self._clear_ab()
        self.mode = Idle()
        self.emit("mode_reset")

    def _clear_ab(self) -> None:
        if isinstance(self.mode, DrawFootway):
            self.mode.point_a = None
            self.mode.point_b = None
        self.renderer.clear_draft_points()

    def cancel(self) -> bool:
        """
        Escape / 취소 버튼.

        어떤 모드에서든 A/B 점과 초안을 지우고 idle 로 돌아간다.
        이미 깨끗한 idle 상태면 아무 일도 하지 않는다 (False).
        """
        pending = not isinstance(self.mode, Idle) or self.surface.count(DRAFT_LAYER) > 0
        if not pending:
            return False
        self.reset_mode()
        self.notify("info", "작업이 취소되었습니다.")
        return True

    # ----- 모달 / 지도 상호작용 -----

    def set_modal_open(self, is_open: bool) -> None:
        self.modal_open = bool(is_open)

    def interactions(self) -> dict:
        """모달이 열려 있으면 드래그/줌 계열 상호작용을 모두 끈다."""
        enabled = not self.modal_open
        return {
            "dragging": enabled,
            "touch_zoom": enabled,
            "double_click_zoom": enabled,
            "scroll_wheel_zoom": enabled,
        }

    # ----- 클릭 처리 -----

    def handle_map_click(self, ll: LatLng) -> None:
        if self.modal_open:
            logger.debug("map click ignored: modal open")
            return
        if self.viewport is None:
            logger.warning("map click ignored: viewport not set yet")
            return
        effective = snap(ll, self.vertices(), self.viewport, self.snap_px)
        try:
            handler = self.CLICK_HANDLERS[type(self.mode)]
        except KeyError:
            raise UnknownMode(repr(self.mode))
        handler(self, effective)

    def _click_idle(self, ll: LatLng) -> None:
        # idle 에서는 지도 클릭으로 아무것도 만들지 않는다. 편집은 오버레이 클릭으로.
        pass

    def _click_add_building(self, ll: LatLng) -> None:
        self.emit("location_selected", latitude=ll.lat, longitude=ll.lng)
        self.reset_mode()

    def _click_footway(self, ll: LatLng) -> None:
        self._record_ab(ll)

    def _click_place_point(self, ll: LatLng) -> None:
        building_id = nearest_building_id(self.collections[kinds.BUILDING], ll)
        self.mode.draft = PendingDraft(self.mode.kind, ll, "", building_id)

    CLICK_HANDLERS = {
        Idle: _click_idle,
        AddBuilding: _click_add_building,
        DrawFootway: _click_footway,
        PlacePoint: _click_place_point,
    }

    def pick_vertex_as_ab(self, ll: LatLng) -> None:
        """꼭짓점 마커 클릭. 이미 정확한 꼭짓점이므로 스냅을 거치지 않는다."""
        if not isinstance(self.mode, DrawFootway):
            return
        self._record_ab(ll)

    def _record_ab(self, ll: LatLng) -> None:
        mode = self.mode
        if mode.point_a is None:
            mode.point_a = ll
            self.renderer.draw_draft_point("A", ll)
            self.notify("info", "A 지점이 지정되었습니다. B 지점을 클릭하거나 꼭짓점을 선택하세요.")
            return
        if mode.point_b is None:
            mode.point_b = ll
            self.renderer.draw_draft_point("B", ll)
            self._complete_footway()

    def _complete_footway(self) -> None:
        mode = self.mode
        row = {
            "name": None,
            "state": "OPEN",
            "access_type": self.selection.footway_transit,
            "geom": line_geojson([mode.point_a, mode.point_b]),
        }
        try:
            self.store.insert(kinds.FOOTWAY, row)
        except StoreError as e:
            logger.warning("footway insert failed: %s", e)
            self.notify("error", "보행로를 저장하지 못했습니다.")
            # 모드는 그대로 두고 A/B 만 지운다 (다시 시도 가능)
            self._clear_ab()
            return
        self.notify("success", "보행로가 생성되었습니다.")
        self._clear_ab()
        self.refresh(kinds.FOOTWAY)
        self.reset_mode()

    def click_overlay(self, handle: str) -> None:
        """
        오버레이 클릭 라우팅.

        - 엔티티 오버레이: edit_request 이벤트 (편집 모달은 호스트 화면 담당)
        - 꼭짓점 마커   : footwayAB 모드에서 A/B 지점으로 사용
        """
        overlay = self.surface.get(handle)
        if overlay is None:
            raise UnknownOverlay(handle)
        if self.modal_open:
            logger.debug("overlay click ignored: modal open")
            return
        action = overlay.get("action") or {}
        if action.get("type") == "edit":
            self.emit("edit_request", kind=action["kind"], id=action["id"])
        elif action.get("type") == "pick_vertex":
            self.pick_vertex_as_ab(LatLng(action["lat"], action["lng"]))

    # ----- 미니 폼 (Pending Draft) -----

    @property
    def draft(self):
        if isinstance(self.mode, PlacePoint):
            return self.mode.draft
        return None

    def _form(self) -> PendingEntityForm:
        if self.draft is None:
            raise NoDraft("no pending draft")
        return PendingEntityForm(self.draft, self.collections[kinds.BUILDING])

    def update_draft(self, name=_MISSING, building_id=_MISSING) -> None:
        form = self._form()
        if name is not _MISSING:
            form.update_name(name)
        if building_id is not _MISSING:
            form.update_building_id(building_id)

    def submit_draft(self):
        """
        초안 저장. 성공/실패와 관계없이 초안은 지워지고 idle 로 돌아간다.
        저장된 행(dict) 또는 실패 시 None.
        """
        form = self._form()
        kind = form.draft.kind
        label = KIND_LABELS[kind]
        saved = None
        try:
            saved = form.submit(self.store, self.selection.type_for(kind))
        except StoreError as e:
            logger.warning("%s insert failed: %s", kind, e)
            self.notify("error", f"{label}을(를) 저장하지 못했습니다.")
        if saved is not None:
            self.notify("success", f"{label}이(가) 저장되었습니다.")
            self.refresh(kind)
        self.reset_mode()
        return saved

    def cancel_draft(self) -> None:
        if self.draft is None:
            return
        self.reset_mode()

    # ----- 응답 / 상태 저장 -----

    def draft_snapshot(self):
        draft = self.draft
        if draft is None:
            return None
        return {
            "kind": draft.kind,
            "coordinate": draft.coordinate.to_dict(),
            "name": draft.name,
            "building_id": draft.building_id,
            "building_options": self._form().building_options(),
        }

    def ab_snapshot(self):
        if not isinstance(self.mode, DrawFootway):
            return None
        a, b = self.mode.point_a, self.mode.point_b
        return {"a": a.to_dict() if a else None, "b": b.to_dict() if b else None}

    def snapshot(self) -> dict:
        return {
            "mode": self.mode.name,
            "banner": banner(self.mode, self.selection),
            "selection": self.selection.to_state(),
            "ab": self.ab_snapshot(),
            "draft": self.draft_snapshot(),
            "modal_open": self.modal_open,
            "interactions": self.interactions(),
            "viewport": self.viewport.to_dict() if self.viewport else None,
            "ops": self.surface.drain_ops(),
            "events": list(self.events),
            "notices": list(self.notices),
        }

    def to_state(self) -> dict:
        return {
            "mode": self.mode.to_state(),
            "selection": self.selection.to_state(),
            "viewport": self.viewport.to_dict() if self.viewport else None,
            "modal_open": self.modal_open,
            "surface": self.surface.to_state(),
        }

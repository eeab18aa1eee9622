# campusmap/layers.py
"""
지도 오버레이 렌더링 (Layer Renderer).

서버가 "지도에 무엇이 그려져 있어야 하는지"를 오버레이 목록으로 계산하고,
직전 렌더 결과와 비교(diff)해서 클라이언트에 add/remove 연산만 내려준다.

오버레이 하나 = JSON 으로 직렬화 가능한 dict
    {
      "layer": "building" | "footway" | "entrance" | "parking" | "landmark"
               | "vertex" | "draft",
      "key": "building:3",            # 레이어 안에서 유일
      "shape": "marker" | "polyline",
      "coordinates": [lat, lng] 또는 [[lat, lng], ...],   # Leaflet 순서
      "title": "...",
      "style": {...},
      "action": {"type": "edit", "kind": ..., "id": ...}
                | {"type": "pick_vertex", "index": n, "lat": .., "lng": ..}
                | None,
    }

규칙: 렌더 한 번이 끝나면 해당 레이어에는 엔티티당 정확히 하나의 오버레이만 남는다.
(이전 패스의 핸들은 제거되거나 그대로 재사용되며, 새는 핸들은 없다)
"""
import json
import logging
from typing import Dict, Iterable, List

from . import kinds
from .geo import LatLng, building_latlng, line_positions, point_from_geojson

logger = logging.getLogger(__name__)

VERTEX_LAYER = "vertex"
DRAFT_LAYER = "draft"

PRIMARY_COLOR = "#002E45"
REPAIR_COLOR = "#f59e0b"
CLOSED_COLOR = "#ef4444"
VERTEX_COLOR = "#f59e0b"
DRAFT_COLOR = "#ea580c"
PARKING_COLOR = "#2563eb"
LANDMARK_COLOR = "#9333ea"
MUTED_OPACITY = 0.4

# 보행로 선 불투명도. 관리 콘솔은 관리자 전용이라 항상 관리자 값(0.95)을 쓴다.
# (일반 사용자 지도는 0.8)
FOOTWAY_OPACITY = 0.95

FOOTWAY_COLORS = {
    "pedestrian": "#10b981",
    "vehicular": "#0ea5e9",
    "both": "#f59e0b",
}

ENTRANCE_COLORS = {
    "vehicular": "#ef4444",
    "both": "#f59e0b",
    "pedestrian": "#10b981",
}

LANDMARK_LABELS = {
    "plaza": "Plz",
    "bar": "Bar",
    "corridor": "Cor",
}


# ----- 스타일 (순수 함수) -----

def building_style(building: dict) -> dict:
    color = REPAIR_COLOR if building.get("state") == "UNDER_REPAIR" else PRIMARY_COLOR
    return {"icon": "circle", "label": str(building.get("total_floors")), "color": color, "size": 32}


def footway_stroke(footway: dict) -> dict:
    """접근 유형별 기본 색, 폐쇄(CLOSED)면 빨간 점선."""
    base = FOOTWAY_COLORS.get(footway.get("access_type"), FOOTWAY_COLORS["both"])
    closed = footway.get("state") == "CLOSED"
    return {
        "color": CLOSED_COLOR if closed else base,
        "weight": 4,
        "opacity": FOOTWAY_OPACITY,
        "dashArray": "6 6" if closed else None,
    }


def _opacity(entity: dict) -> float:
    # is_active 가 명시적으로 False 일 때만 흐리게
    return MUTED_OPACITY if entity.get("is_active") is False else 1.0


def entrance_style(entrance: dict) -> dict:
    color = ENTRANCE_COLORS.get(entrance.get("type"), ENTRANCE_COLORS["pedestrian"])
    return {"icon": "dot", "label": "", "color": color, "size": 10, "opacity": _opacity(entrance)}


def parking_style(parking: dict) -> dict:
    return {"icon": "badge", "label": "P", "color": PARKING_COLOR, "size": 18, "opacity": _opacity(parking)}


def landmark_style(landmark: dict) -> dict:
    label = LANDMARK_LABELS.get(landmark.get("type"), "Ref")
    return {"icon": "badge", "label": label, "color": LANDMARK_COLOR, "size": 18, "opacity": _opacity(landmark)}


POINT_STYLES = {
    kinds.ENTRANCE: entrance_style,
    kinds.PARKING: parking_style,
    kinds.LANDMARK: landmark_style,
}

POINT_TITLES = {
    kinds.ENTRANCE: "출입구",
    kinds.PARKING: "주차장",
    kinds.LANDMARK: "랜드마크",
}


# ----- 엔티티 → 오버레이 -----

def _edit_action(kind: str, entity: dict) -> dict:
    return {"type": "edit", "kind": kind, "id": entity.get("id")}


def building_overlays(buildings: Iterable[dict]) -> List[dict]:
    out = []
    for b in buildings:
        pos = building_latlng(b)
        if pos is None:
            continue
        out.append({
            "layer": kinds.BUILDING,
            "key": f"building:{b.get('id')}",
            "shape": "marker",
            "coordinates": [pos.lat, pos.lng],
            "title": b.get("name") or "건물",
            "style": building_style(b),
            "action": _edit_action(kinds.BUILDING, b),
        })
    return out


def footway_overlays(footways: Iterable[dict]) -> List[dict]:
    out = []
    for fw in footways:
        points = line_positions(fw.get("geom"))
        if len(points) < 2:
            continue
        out.append({
            "layer": kinds.FOOTWAY,
            "key": f"footway:{fw.get('id')}",
            "shape": "polyline",
            "coordinates": [[p.lat, p.lng] for p in points],
            "title": fw.get("name") or "보행로",
            "style": footway_stroke(fw),
            "action": _edit_action(kinds.FOOTWAY, fw),
        })
    return out


def vertex_overlays(footways: Iterable[dict]) -> List[dict]:
    """
    보행로 꼭짓점 마커. 모든 보행로에 걸쳐 1부터 순서대로 번호를 매긴다.

    snapping.collect_vertices() 와 같은 순서를 써야 번호와 스냅 대상이 일치한다.
    """
    out = []
    idx = 1
    for fw in footways:
        for p in line_positions(fw.get("geom")):
            out.append({
                "layer": VERTEX_LAYER,
                "key": f"vertex:{idx}",
                "shape": "marker",
                "coordinates": [p.lat, p.lng],
                "title": f"꼭짓점 {idx}",
                "style": {"icon": "vertex", "label": str(idx), "color": VERTEX_COLOR, "size": 20},
                "action": {"type": "pick_vertex", "index": idx, "lat": p.lat, "lng": p.lng},
            })
            idx += 1
    return out


def point_overlays(kind: str, entities: Iterable[dict]) -> List[dict]:
    style_fn = POINT_STYLES[kind]
    out = []
    for e in entities:
        pos = point_from_geojson(e.get("location"))
        if pos is None:
            continue
        out.append({
            "layer": kind,
            "key": f"{kind}:{e.get('id')}",
            "shape": "marker",
            "coordinates": [pos.lat, pos.lng],
            "title": e.get("name") or f"{POINT_TITLES[kind]} ({e.get('type')})",
            "style": style_fn(e),
            "action": _edit_action(kind, e),
        })
    return out


def draft_overlay(label: str, ll: LatLng) -> dict:
    """보행로 그리기 중 A/B 점 마커."""
    return {
        "layer": DRAFT_LAYER,
        "key": f"draft:{label}",
        "shape": "marker",
        "coordinates": [ll.lat, ll.lng],
        "title": label,
        "style": {"icon": "pin", "label": label, "color": DRAFT_COLOR, "size": 32},
        "action": None,
    }


def build_overlays(kind: str, entities: Iterable[dict]) -> List[dict]:
    if kind == kinds.BUILDING:
        return building_overlays(entities)
    if kind == kinds.FOOTWAY:
        return footway_overlays(entities)
    if kind in POINT_STYLES:
        return point_overlays(kind, entities)
    raise ValueError(f"unknown layer kind: {kind}")


# ----- 오버레이 표면 (핸들 관리) -----

def signature(overlay: dict) -> str:
    return json.dumps(overlay, sort_keys=True, default=str)


class OverlaySurface:
    """
    클라이언트 지도에 올라가 있는 오버레이 목록의 서버 쪽 사본.

    - add/remove 할 때마다 ops 에 연산을 쌓고, 응답 시 drain_ops() 로 내보낸다.
    - 상태(to_state)는 세션에 저장된다.
    """

    def __init__(self, state: dict = None):
        state = state or {}
        self._next = int(state.get("next", 1))
        self._overlays: Dict[str, dict] = dict(state.get("overlays") or {})
        self._ops: List[dict] = []

    def add(self, overlay: dict) -> str:
        handle = f"ov-{self._next}"
        self._next += 1
        self._overlays[handle] = overlay
        self._ops.append({"op": "add", "handle": handle, "overlay": overlay})
        return handle

    def remove(self, handle: str) -> None:
        if self._overlays.pop(handle, None) is not None:
            self._ops.append({"op": "remove", "handle": handle})

    def get(self, handle: str):
        return self._overlays.get(handle)

    def layer_handles(self, layer: str) -> Dict[str, str]:
        """레이어 안의 key -> handle."""
        return {ov["key"]: h for h, ov in self._overlays.items() if ov.get("layer") == layer}

    def clear_layer(self, layer: str) -> None:
        for handle in list(self.layer_handles(layer).values()):
            self.remove(handle)

    def clear(self) -> None:
        for handle in list(self._overlays):
            self.remove(handle)

    def count(self, layer: str = None) -> int:
        if layer is None:
            return len(self._overlays)
        return len(self.layer_handles(layer))

    def overlays(self) -> List[dict]:
        """현재 핸들 + 오버레이 전체 (스냅샷 응답용)."""
        return [{"handle": h, "overlay": ov} for h, ov in self._overlays.items()]

    def drain_ops(self) -> List[dict]:
        ops, self._ops = self._ops, []
        return ops

    def to_state(self) -> dict:
        return {"next": self._next, "overlays": dict(self._overlays)}


class LayerDiff:
    def __init__(self, added=None, removed=None, changed=None):
        self.added = added or []
        self.removed = removed or []
        self.changed = changed or []

    @property
    def empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    def __repr__(self):
        return f"LayerDiff(added={self.added}, removed={self.removed}, changed={self.changed})"


def diff_overlays(previous: Dict[str, dict], nxt: Iterable[dict]) -> LayerDiff:
    """
    key 기준으로 이전/다음 오버레이를 비교한다.

    - previous: key -> overlay
    - 반환되는 리스트들은 key 목록 (added/changed 는 nxt 순서)
    """
    nxt_by_key = {}
    for ov in nxt:
        nxt_by_key[ov["key"]] = ov
    diff = LayerDiff()
    for key, ov in nxt_by_key.items():
        if key not in previous:
            diff.added.append(key)
        elif signature(previous[key]) != signature(ov):
            diff.changed.append(key)
    diff.removed = [key for key in previous if key not in nxt_by_key]
    return diff


class LayerRenderer:
    """엔티티 컬렉션을 받아 OverlaySurface 를 최신 상태로 맞춘다."""

    def __init__(self, surface: OverlaySurface):
        self.surface = surface

    def _reconcile(self, layer: str, overlays: List[dict]) -> LayerDiff:
        handles = self.surface.layer_handles(layer)
        previous = {key: self.surface.get(h) for key, h in handles.items()}
        diff = diff_overlays(previous, overlays)
        by_key = {ov["key"]: ov for ov in overlays}

        # 이전 패스의 핸들을 먼저 정리한 뒤 새 오버레이를 만든다.
        for key in diff.removed + diff.changed:
            self.surface.remove(handles[key])
        for key in diff.changed + diff.added:
            self.surface.add(by_key[key])
        if not diff.empty:
            logger.debug("layer %s: %r", layer, diff)
        return diff

    def render_layer(self, kind: str, entities: List[dict]) -> LayerDiff:
        diff = self._reconcile(kind, build_overlays(kind, entities))
        if kind == kinds.FOOTWAY:
            # 꼭짓점 마커는 보행로 데이터가 바뀔 때마다 다시 계산한다.
            self._reconcile(VERTEX_LAYER, vertex_overlays(entities))
        return diff

    def draw_draft_point(self, label: str, ll: LatLng) -> str:
        handles = self.surface.layer_handles(DRAFT_LAYER)
        key = f"draft:{label}"
        if key in handles:
            self.surface.remove(handles[key])
        return self.surface.add(draft_overlay(label, ll))

    def clear_draft_points(self) -> None:
        self.surface.clear_layer(DRAFT_LAYER)

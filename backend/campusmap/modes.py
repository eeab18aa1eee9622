# campusmap/modes.py
"""
에디터 모드 (Mode State Machine 의 상태 정의).

모드는 항상 하나만 활성화되며, 각 모드는 자기에게 필요한 임시 상태만 가진다.
    - Idle          : 임시 상태 없음. 지도 클릭은 아무것도 만들지 않는다.
    - AddBuilding   : 다음 클릭 위치를 건물 폼으로 넘긴다.
    - DrawFootway   : A/B 두 점
    - PlacePoint    : 출입구/주차장/랜드마크 + 미니 폼 초안(PendingDraft)

세션 저장용 이름은 프론트엔드와 맞춘다:
    idle | addBuilding | footwayAB | entrance | parking | landmark
"""
from . import kinds
from .drafts import PendingDraft
from .geo import LatLng

IDLE = "idle"
ADD_BUILDING = "addBuilding"
FOOTWAY_AB = "footwayAB"

MODE_NAMES = (IDLE, ADD_BUILDING, FOOTWAY_AB) + kinds.POINT_KINDS


class UnknownMode(ValueError):
    pass


class Mode:
    name = None

    def to_state(self) -> dict:
        return {"name": self.name}

    def __eq__(self, other):
        return type(self) is type(other) and self.to_state() == other.to_state()

    def __repr__(self):
        return f"{type(self).__name__}({self.to_state()})"


class Idle(Mode):
    name = IDLE


class AddBuilding(Mode):
    name = ADD_BUILDING


class DrawFootway(Mode):
    name = FOOTWAY_AB

    def __init__(self, point_a: LatLng = None, point_b: LatLng = None):
        self.point_a = point_a
        self.point_b = point_b

    def to_state(self) -> dict:
        return {
            "name": self.name,
            "a": list(self.point_a) if self.point_a else None,
            "b": list(self.point_b) if self.point_b else None,
        }


class PlacePoint(Mode):
    def __init__(self, kind: str, draft: PendingDraft = None):
        if kind not in kinds.POINT_KINDS:
            raise UnknownMode(kind)
        self.kind = kind
        self.draft = draft

    @property
    def name(self):
        return self.kind

    def to_state(self) -> dict:
        return {"name": self.name, "draft": self.draft.to_state() if self.draft else None}


def mode_from_name(name: str) -> Mode:
    """모드 이름으로 임시 상태가 비어 있는 새 모드를 만든다."""
    if name == IDLE:
        return Idle()
    if name == ADD_BUILDING:
        return AddBuilding()
    if name == FOOTWAY_AB:
        return DrawFootway()
    if name in kinds.POINT_KINDS:
        return PlacePoint(name)
    raise UnknownMode(name)


def mode_from_state(state) -> Mode:
    """세션에 저장된 dict 에서 모드 복원. 비어 있으면 Idle."""
    if not state:
        return Idle()
    mode = mode_from_name(state.get("name"))
    if isinstance(mode, DrawFootway):
        a, b = state.get("a"), state.get("b")
        mode.point_a = LatLng(*a) if a else None
        mode.point_b = LatLng(*b) if b else None
    elif isinstance(mode, PlacePoint) and state.get("draft"):
        mode.draft = PendingDraft.from_state(state["draft"])
    return mode


class Selection:
    """
    호스트 화면(명령 메뉴)에서 고른 타입들.

    - footway_transit : 새 보행로 접근 유형
    - entrance_type / parking_type / landmark_type : 새 점 엔티티 타입
    """

    FIELDS = {
        "footway_transit": kinds.FOOTWAY_TRANSITS,
        "entrance_type": kinds.ENTRANCE_TYPES,
        "parking_type": kinds.PARKING_TYPES,
        "landmark_type": kinds.LANDMARK_TYPES,
    }

    def __init__(self, footway_transit="pedestrian", entrance_type="pedestrian",
                 parking_type="car", landmark_type="plaza"):
        self.footway_transit = footway_transit
        self.entrance_type = entrance_type
        self.parking_type = parking_type
        self.landmark_type = landmark_type

    def update(self, values: dict) -> None:
        """
        값 검증 후 한 번에 반영. 하나라도 잘못되면 아무것도 바꾸지 않는다.

        values 는 요청 본문 그대로 들어올 수 있으므로 dict 로 받는다 (키워드 인자로 풀지 않는다).
        """
        if not isinstance(values, dict):
            raise ValueError("selection must be an object")
        for field, value in values.items():
            allowed = self.FIELDS.get(field)
            if allowed is None:
                raise ValueError(f"unknown selection field: {field}")
            if value not in allowed:
                raise ValueError(f"invalid {field}: {value!r}")
        for field, value in values.items():
            setattr(self, field, value)

    def type_for(self, kind: str) -> str:
        return getattr(self, f"{kind}_type")

    def to_state(self) -> dict:
        return {field: getattr(self, field) for field in self.FIELDS}

    @classmethod
    def from_state(cls, state) -> "Selection":
        sel = cls()
        if state:
            sel.update({k: v for k, v in state.items() if k in cls.FIELDS})
        return sel


def banner(mode: Mode, selection: Selection) -> str:
    """
    현재 모드 안내 문구. Idle 이거나 미니 폼이 열려 있으면 빈 문자열.
    """
    if isinstance(mode, Idle):
        return ""
    if isinstance(mode, AddBuilding):
        return "건물 추가 • 지도 클릭"
    if isinstance(mode, DrawFootway):
        label = kinds.TRANSIT_LABELS[selection.footway_transit]
        return f"{label} 통로 그리기 (A→B) • 꼭짓점 또는 지도 클릭"
    if isinstance(mode, PlacePoint):
        if mode.draft is not None:
            return ""
        if mode.kind == kinds.ENTRANCE:
            return f"새 출입구 ({selection.entrance_type}) • 지도 클릭"
        if mode.kind == kinds.PARKING:
            return f"새 주차장 ({selection.parking_type}) • 지도 클릭"
        return "새 랜드마크 • 지도 클릭"
    raise UnknownMode(repr(mode))

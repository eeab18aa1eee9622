# campusmap/drafts.py
"""
점 엔티티 미니 폼 (Pending-Entity Mini-Form).

출입구/주차장/랜드마크 모드에서 지도를 클릭하면 바로 저장하지 않고,
이름과 연결할 건물을 고를 수 있는 임시 초안(PendingDraft)을 먼저 띄운다.
"""
from typing import List

from . import kinds
from .geo import LatLng, buildings_by_distance, point_geojson


class DraftError(ValueError):
    """초안 값이 잘못된 경우 (알 수 없는 건물 id 등)."""


class PendingDraft:
    """저장 전 점 엔티티 한 개: kind, 좌표, 이름, 연결 건물 id."""

    def __init__(self, kind: str, coordinate: LatLng, name: str = "", building_id=None):
        if kind not in kinds.POINT_KINDS:
            raise DraftError(f"not a point kind: {kind}")
        self.kind = kind
        self.coordinate = coordinate
        self.name = name
        self.building_id = building_id

    def to_state(self) -> dict:
        return {
            "kind": self.kind,
            "coordinate": list(self.coordinate),
            "name": self.name,
            "building_id": self.building_id,
        }

    @classmethod
    def from_state(cls, state: dict) -> "PendingDraft":
        lat, lng = state["coordinate"]
        return cls(state["kind"], LatLng(lat, lng), state.get("name") or "", state.get("building_id"))

    def __eq__(self, other):
        return isinstance(other, PendingDraft) and self.to_state() == other.to_state()

    def __repr__(self):
        return f"PendingDraft({self.kind}, {tuple(self.coordinate)}, name={self.name!r}, building_id={self.building_id!r})"


class PendingEntityForm:
    """
    PendingDraft 를 편집/저장하는 폼.

    - buildings: 현재 로드된 건물 목록 (연결 후보, 거리순 정렬에 사용)
    """

    def __init__(self, draft: PendingDraft, buildings: List[dict]):
        self.draft = draft
        self.buildings = buildings

    def update_name(self, name) -> None:
        self.draft.name = "" if name is None else str(name)

    def update_building_id(self, building_id) -> None:
        """연결 건물 변경. None/"" 이면 연결 해제."""
        if building_id in (None, ""):
            self.draft.building_id = None
            return
        for b in self.buildings:
            if str(b.get("id")) == str(building_id):
                self.draft.building_id = b.get("id")
                return
        raise DraftError(f"unknown building: {building_id}")

    def building_options(self) -> List[dict]:
        """초안 좌표에서 가까운 순으로 정렬한 건물 목록 (가장 가까운 건물이 맨 앞)."""
        return [
            {"id": b.get("id"), "name": b.get("name")}
            for b in buildings_by_distance(self.buildings, self.draft.coordinate)
        ]

    def build_row(self, entity_type: str) -> dict:
        """
        저장소에 넣을 행(dict).

        - 이름은 선택 사항: 빈 문자열이면 null
        - is_active 는 항상 True 로 생성
        - 주차장은 capacity 를 비워둔다 (편집 모달에서 채움)
        """
        draft = self.draft
        if entity_type not in kinds.POINT_TYPES[draft.kind]:
            raise DraftError(f"invalid {draft.kind} type: {entity_type}")
        row = {
            "name": draft.name.strip() or None,
            "building_id": draft.building_id,
            "type": entity_type,
            "is_active": True,
            "location": point_geojson(draft.coordinate),
        }
        if draft.kind == kinds.PARKING:
            row["capacity"] = None
        return row

    def submit(self, store, entity_type: str) -> dict:
        """초안을 저장소에 넣고 저장된 행을 돌려준다. 실패 시 StoreError 가 그대로 올라간다."""
        return store.insert(self.draft.kind, self.build_row(entity_type))

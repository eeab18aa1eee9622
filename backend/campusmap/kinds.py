# campusmap/kinds.py
"""
엔티티 종류 / 타입 상수 모음.

- kind       : 에디터 내부에서 쓰는 단수형 이름 (building, footway, ...)
- collection : URL 에서 쓰는 복수형 이름 (buildings, footways, ...)
"""

BUILDING = "building"
FOOTWAY = "footway"
ENTRANCE = "entrance"
PARKING = "parking"
LANDMARK = "landmark"

# 렌더링/로딩 순서
KINDS = (BUILDING, FOOTWAY, ENTRANCE, PARKING, LANDMARK)

# 미니 폼(Pending Draft)으로 생성되는 점 엔티티
POINT_KINDS = (ENTRANCE, PARKING, LANDMARK)

COLLECTIONS = {
    "buildings": BUILDING,
    "footways": FOOTWAY,
    "entrances": ENTRANCE,
    "parkings": PARKING,
    "landmarks": LANDMARK,
}

FOOTWAY_TRANSITS = ("pedestrian", "vehicular", "both")
ENTRANCE_TYPES = ("pedestrian", "vehicular", "both")
PARKING_TYPES = ("car", "motorcycle", "mixed")
LANDMARK_TYPES = ("plaza", "bar", "corridor", "other")

# 점 엔티티 kind -> 허용 타입
POINT_TYPES = {
    ENTRANCE: ENTRANCE_TYPES,
    PARKING: PARKING_TYPES,
    LANDMARK: LANDMARK_TYPES,
}

TRANSIT_LABELS = {
    "pedestrian": "보행자",
    "vehicular": "차량",
    "both": "겸용",
}


def kind_for_collection(name: str):
    """URL 의 컬렉션 이름을 kind 로 바꾼다. 모르는 이름이면 None."""
    return COLLECTIONS.get(name)

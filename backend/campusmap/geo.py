# campusmap/geo.py
"""
지리 좌표 유틸리티.

- LatLng: (위도, 경도) 튜플
- GeoJSON Point / LineString 변환 (좌표 순서는 [lng, lat])
- 대권거리(haversine) 및 "가까운 건물 순" 정렬
"""
import math
from typing import Iterable, List, NamedTuple, Optional

# Leaflet CRS.Earth 와 같은 지구 반지름 (m)
EARTH_RADIUS_M = 6371000.0


class LatLng(NamedTuple):
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}

    def to_position(self) -> list:
        # GeoJSON position: [lng, lat]
        return [self.lng, self.lat]


def is_finite(ll: LatLng) -> bool:
    return math.isfinite(ll.lat) and math.isfinite(ll.lng)


def parse_latlng(lat, lng) -> LatLng:
    """
    요청 값 두 개를 LatLng 로 변환한다.

    숫자로 바꿀 수 없거나 범위를 벗어나면 ValueError.
    """
    try:
        ll = LatLng(float(lat), float(lng))
    except (TypeError, ValueError):
        raise ValueError(f"invalid coordinate: lat={lat!r}, lng={lng!r}")
    if not is_finite(ll) or abs(ll.lat) > 90 or abs(ll.lng) > 180:
        raise ValueError(f"coordinate out of range: {ll.lat}, {ll.lng}")
    return ll


def point_geojson(ll: LatLng) -> dict:
    return {"type": "Point", "coordinates": ll.to_position()}


def line_geojson(points: Iterable[LatLng]) -> dict:
    return {"type": "LineString", "coordinates": [p.to_position() for p in points]}


def point_from_geojson(obj) -> Optional[LatLng]:
    """GeoJSON Point 에서 좌표를 꺼낸다. 형식이 이상하면 None."""
    if not isinstance(obj, dict):
        return None
    coords = obj.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    try:
        ll = LatLng(float(coords[1]), float(coords[0]))
    except (TypeError, ValueError):
        return None
    return ll if is_finite(ll) else None


def line_positions(geom) -> List[LatLng]:
    """
    GeoJSON LineString 의 좌표 목록.

    - 형식이 깨진 좌표, 유한하지 않은 좌표는 건너뛴다.
    - geom 자체가 없으면 빈 리스트.
    """
    if not isinstance(geom, dict):
        return []
    out = []
    for pos in geom.get("coordinates") or []:
        if not isinstance(pos, (list, tuple)) or len(pos) < 2:
            continue
        try:
            ll = LatLng(float(pos[1]), float(pos[0]))
        except (TypeError, ValueError):
            continue
        if is_finite(ll):
            out.append(ll)
    return out


def building_latlng(building: dict) -> Optional[LatLng]:
    try:
        ll = LatLng(float(building.get("latitude")), float(building.get("longitude")))
    except (TypeError, ValueError):
        return None
    return ll if is_finite(ll) else None


def distance_m(a: LatLng, b: LatLng) -> float:
    """두 좌표 사이의 대권거리 (haversine, m)."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = phi2 - phi1
    dlmb = math.radians(b.lng - a.lng)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def buildings_by_distance(buildings: Iterable[dict], ll: LatLng) -> List[dict]:
    """
    건물 목록을 ll 로부터 가까운 순으로 정렬해 반환한다.

    - sorted() 는 안정 정렬이므로 거리가 같으면 원래 순서가 유지된다.
    - 좌표가 없는 건물은 목록에서 빠진다.
    """
    ranked = []
    for b in buildings:
        pos = building_latlng(b)
        if pos is None:
            continue
        ranked.append((distance_m(ll, pos), b))
    ranked.sort(key=lambda item: item[0])
    return [b for _, b in ranked]


def nearest_building_id(buildings: Iterable[dict], ll: LatLng):
    """가장 가까운 건물 id. 건물이 하나도 없으면 None."""
    ranked = buildings_by_distance(buildings, ll)
    if not ranked:
        return None
    return ranked[0].get("id")

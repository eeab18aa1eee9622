# campusmap/projection.py
"""
좌표 ↔ 화면 픽셀 변환 (Coordinate Projection Adapter).

클라이언트 지도(Leaflet, EPSG:3857)의 현재 뷰포트를 서버에서 재현한다.
- 구면 웹 메르카토르, 타일 한 장 = TILE_SIZE px
- 컨테이너 좌표: 지도 div 왼쪽 위가 (0, 0), 중심이 (width/2, height/2)

스냅(snapping)에서 "몇 픽셀 떨어져 있는가"를 계산하는 데에만 쓰인다.
"""
import math
from typing import Tuple

from .conf import map_setting
from .geo import LatLng, parse_latlng

# 웹 메르카토르가 표현할 수 있는 위도 한계
MAX_LATITUDE = 85.0511287798

# 타일 서버가 제공하는 줌보다 훨씬 크다. 이보다 크면 월드 픽셀 크기가 float 범위를 넘는다.
MAX_ZOOM = 30


def _world_size(zoom: float, tile_size: int) -> float:
    return tile_size * (2 ** zoom)


def project(ll: LatLng, zoom: float, tile_size: int = 256) -> Tuple[float, float]:
    """위경도를 해당 줌의 '월드 픽셀' 좌표로 변환."""
    size = _world_size(zoom, tile_size)
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, ll.lat))
    x = size * (ll.lng + 180.0) / 360.0
    sin_lat = math.sin(math.radians(lat))
    y = size * (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi))
    return x, y


def unproject(x: float, y: float, zoom: float, tile_size: int = 256) -> LatLng:
    """project() 의 역변환."""
    size = _world_size(zoom, tile_size)
    lng = x / size * 360.0 - 180.0
    n = math.pi - 2 * math.pi * y / size
    lat = math.degrees(math.atan(math.sinh(n)))
    return LatLng(lat, lng)


class Viewport:
    """
    클라이언트가 보고 있는 지도 화면 한 장.

    - center : 화면 중심 좌표
    - zoom   : Leaflet 줌 레벨 (소수 줌 허용)
    - width, height : 지도 컨테이너 크기 (px)
    """

    def __init__(self, center: LatLng, zoom: float, width: int, height: int, tile_size: int = None):
        self.center = center
        self.zoom = zoom
        self.width = width
        self.height = height
        self.tile_size = tile_size or map_setting("TILE_SIZE")
        self._origin = project(center, zoom, self.tile_size)

    def latlng_to_point(self, ll: LatLng) -> Tuple[float, float]:
        """위경도 → 컨테이너 픽셀 좌표."""
        x, y = project(ll, self.zoom, self.tile_size)
        return (
            x - self._origin[0] + self.width / 2,
            y - self._origin[1] + self.height / 2,
        )

    def point_to_latlng(self, px: float, py: float) -> LatLng:
        """컨테이너 픽셀 좌표 → 위경도."""
        x = px - self.width / 2 + self._origin[0]
        y = py - self.height / 2 + self._origin[1]
        return unproject(x, y, self.zoom, self.tile_size)

    def pixel_distance(self, a: LatLng, b: LatLng) -> float:
        ax, ay = self.latlng_to_point(a)
        bx, by = self.latlng_to_point(b)
        return math.hypot(ax - bx, ay - by)

    def to_dict(self) -> dict:
        return {
            "center": self.center.to_dict(),
            "zoom": self.zoom,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data) -> "Viewport":
        """
        {"center": {"lat", "lng"}, "zoom", "width", "height"} 형태를 읽는다.

        값이 빠졌거나 숫자가 아니면 ValueError.
        """
        if not isinstance(data, dict):
            raise ValueError("viewport must be an object")
        center = data.get("center") or {}
        if not isinstance(center, dict):
            raise ValueError("viewport.center must be an object")
        ll = parse_latlng(center.get("lat"), center.get("lng"))
        try:
            zoom = float(data.get("zoom"))
            width = int(data.get("width"))
            height = int(data.get("height"))
        except (TypeError, ValueError):
            raise ValueError("viewport zoom/width/height must be numbers")
        if not math.isfinite(zoom) or not 0 <= zoom <= MAX_ZOOM or width <= 0 or height <= 0:
            raise ValueError("viewport zoom/width/height out of range")
        return cls(ll, zoom, width, height)

    def __repr__(self):
        return f"Viewport(center={tuple(self.center)}, zoom={self.zoom}, size={self.width}x{self.height})"

# campusmap/snapping.py
"""
꼭짓점 스냅 (Snapping Engine).

새 보행로의 끝점을 기존 보행로 꼭짓점에 정확히 붙여서
보행로들이 하나의 연결된 그래프가 되도록 한다.

- 비교는 화면 픽셀 거리로 한다 (줌에 따라 허용 오차가 달라지는 것이 자연스럽다).
- 반경 안에 꼭짓점이 없으면 클릭 좌표를 그대로 쓴다.
"""
from typing import Iterable, List, Optional, Tuple

from .conf import map_setting
from .geo import LatLng, line_positions


def collect_vertices(footways: Iterable[dict]) -> List[LatLng]:
    """모든 보행로의 모든 좌표 (보행로 순서 → 좌표 순서)."""
    out = []
    for fw in footways:
        out.extend(line_positions(fw.get("geom")))
    return out


def nearest_vertex(ll: LatLng, vertices: Iterable[LatLng], projection) -> Optional[Tuple[int, LatLng, float]]:
    """
    픽셀 거리상 가장 가까운 꼭짓점 (index, 좌표, 거리px).

    - 최소 거리가 같은 꼭짓점이 여럿이면 먼저 나온 것이 이긴다.
    - 꼭짓점이 없으면 None.
    """
    cx, cy = projection.latlng_to_point(ll)
    best = None
    for idx, v in enumerate(vertices):
        vx, vy = projection.latlng_to_point(v)
        d = ((vx - cx) ** 2 + (vy - cy) ** 2) ** 0.5
        if best is None or d < best[2]:
            best = (idx, v, d)
    return best


def snap(ll: LatLng, vertices: Iterable[LatLng], projection, threshold_px: float = None) -> LatLng:
    """
    ll 에서 threshold_px 안에 있는 가장 가까운 꼭짓점 좌표를 돌려준다.

    projection 이 없으면(지도 뷰포트를 아직 모름) ll 을 그대로 반환.
    """
    if projection is None:
        return ll
    if threshold_px is None:
        threshold_px = map_setting("SNAP_PX")
    best = nearest_vertex(ll, vertices, projection)
    if best is not None and best[2] <= threshold_px:
        return best[1]
    return ll

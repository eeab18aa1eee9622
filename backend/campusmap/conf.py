# campusmap/conf.py
"""
settings.CAMPUS_MAP 읽기 헬퍼.

설정 파일에 키가 없으면 아래 기본값을 쓴다.
"""
from django.conf import settings

DEFAULTS = {
    "CENTER": (-2.14898719, -79.60420553),
    "ZOOM": 18,
    "TILE_SIZE": 256,
    "SNAP_PX": 10,
}


def map_setting(name: str):
    user = getattr(settings, "CAMPUS_MAP", None) or {}
    if name in user:
        return user[name]
    return DEFAULTS[name]

# campusmap/models.py
"""
캠퍼스 지도 엔티티 모델 (Geo-Entity Store).

- Building : 좌표(위도/경도) + 층수 + 상태
- Footway  : GeoJSON LineString 으로 저장되는 보행로/차로
- Entrance / Parking / Landmark : GeoJSON Point 로 저장되는 점 엔티티

지오메트리는 프론트(Leaflet)와 주고받는 GeoJSON 그대로 JSONField에 보관한다.
좌표 순서는 GeoJSON 규칙대로 [경도(lng), 위도(lat)].
"""
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Building(models.Model):
    """캠퍼스 건물. 지도에는 층수가 적힌 원형 마커로 표시된다."""

    STATE_ENABLED = "ENABLED"
    STATE_UNDER_REPAIR = "UNDER_REPAIR"
    STATE_CHOICES = [
        (STATE_ENABLED, "사용 가능"),
        (STATE_UNDER_REPAIR, "수리 중"),
    ]

    name = models.CharField(max_length=255, db_index=True)
    building_code = models.CharField(max_length=50, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    latitude = models.FloatField(validators=[MinValueValidator(-90), MaxValueValidator(90)])
    longitude = models.FloatField(validators=[MinValueValidator(-180), MaxValueValidator(180)])
    total_floors = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    state = models.CharField(max_length=20, choices=STATE_CHOICES, default=STATE_ENABLED)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def to_response(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "building_code": self.building_code,
            "description": self.description,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "total_floors": self.total_floors,
            "state": self.state,
        }

    def __str__(self):
        return f"{self.id}: {self.name}"


class Footway(models.Model):
    """
    보행로/차로.

    - geom: {"type": "LineString", "coordinates": [[lng, lat], ...]}
    - 에디터에서는 A→B 두 점짜리 선만 생성한다. 모양(geom)은 생성 후 바꾸지 않는다.
    """

    STATE_OPEN = "OPEN"
    STATE_CLOSED = "CLOSED"
    STATE_CHOICES = [
        (STATE_OPEN, "개방"),
        (STATE_CLOSED, "폐쇄"),
    ]

    ACCESS_CHOICES = [
        ("pedestrian", "보행자"),
        ("vehicular", "차량"),
        ("both", "겸용"),
    ]

    name = models.CharField(max_length=255, null=True, blank=True)
    state = models.CharField(max_length=10, choices=STATE_CHOICES, default=STATE_OPEN)
    access_type = models.CharField(max_length=20, choices=ACCESS_CHOICES, default="pedestrian")
    geom = models.JSONField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def to_response(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "access_type": self.access_type,
            "geom": self.geom,
        }

    def __str__(self):
        return f"{self.id}: {self.name or '(이름 없음)'} [{self.access_type}]"


class PointEntity(models.Model):
    """
    점 엔티티 공통 필드 (추상 모델).

    - location: {"type": "Point", "coordinates": [lng, lat]}
    - building: 가장 가까운 건물 연결 (선택). 건물이 삭제되면 연결만 끊는다.
    """

    name = models.CharField(max_length=255, null=True, blank=True)
    building = models.ForeignKey(
        Building, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    is_active = models.BooleanField(default=True)
    location = models.JSONField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def to_response(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "building_id": self.building_id,
            "type": self.type,
            "is_active": self.is_active,
            "location": self.location,
        }

    def __str__(self):
        return f"{self.id}: {self.name or '(이름 없음)'} [{self.type}]"


class Entrance(PointEntity):
    TYPE_CHOICES = [
        ("pedestrian", "보행자"),
        ("vehicular", "차량"),
        ("both", "겸용"),
    ]
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="pedestrian")


class Parking(PointEntity):
    TYPE_CHOICES = [
        ("car", "자동차"),
        ("motorcycle", "오토바이"),
        ("mixed", "혼합"),
    ]
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="car")
    capacity = models.PositiveIntegerField(null=True, blank=True)

    def to_response(self) -> dict:
        obj = super().to_response()
        obj["capacity"] = self.capacity
        return obj


class Landmark(PointEntity):
    TYPE_CHOICES = [
        ("plaza", "광장"),
        ("bar", "매점"),
        ("corridor", "복도"),
        ("other", "기타"),
    ]
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="plaza")

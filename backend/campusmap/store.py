# campusmap/store.py
"""
엔티티 저장소 (Geo-Entity Store) 접근 계층.

에디터는 이 인터페이스만 알고, 실제 저장은 Django ORM 구현(DjangoGeoEntityStore)이 맡는다.
테스트에서는 같은 인터페이스의 메모리 구현으로 바꿔 끼운다.

- load(kind)          : 컬렉션 전체 조회 → [dict, ...]
- insert(kind, row)   : 한 행 추가 → 저장된 dict
- get / update / delete : 편집 모달용 (에디터 코어는 쓰지 않음)

모든 실패는 StoreError(또는 하위 클래스)로 올린다.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from . import kinds
from .geo import line_positions
from .models import Building, Entrance, Footway, Landmark, Parking

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """저장소 호출 실패."""


class NotFound(StoreError):
    pass


class InvalidRow(StoreError):
    """검증 실패 (필수 값 누락, 허용되지 않는 타입 등)."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or {}


class GeoEntityStore:
    def load(self, kind: str) -> list:
        raise NotImplementedError

    def insert(self, kind: str, row: dict) -> dict:
        raise NotImplementedError

    def get(self, kind: str, pk) -> dict:
        raise NotImplementedError

    def update(self, kind: str, pk, changes: dict) -> dict:
        raise NotImplementedError

    def delete(self, kind: str, pk) -> None:
        raise NotImplementedError


# kind -> (모델, 기본 정렬, 쓰기 허용 필드)
MODELS = {
    kinds.BUILDING: (
        Building, ("name", "id"),
        ("name", "building_code", "description", "latitude", "longitude", "total_floors", "state"),
    ),
    kinds.FOOTWAY: (
        Footway, ("id",),
        ("name", "state", "access_type", "geom"),
    ),
    kinds.ENTRANCE: (
        Entrance, ("id",),
        ("name", "building_id", "type", "is_active", "location"),
    ),
    kinds.PARKING: (
        Parking, ("id",),
        ("name", "building_id", "type", "is_active", "capacity", "location"),
    ),
    kinds.LANDMARK: (
        Landmark, ("id",),
        ("name", "building_id", "type", "is_active", "location"),
    ),
}


def _model_info(kind):
    try:
        return MODELS[kind]
    except KeyError:
        raise NotFound(f"unknown collection: {kind}")


def validate_geometry(kind: str, row: dict) -> None:
    """GeoJSON 형태 검증. 보행로는 좌표 2개 이상, 점 엔티티는 Point."""
    if kind == kinds.FOOTWAY and "geom" in row:
        geom = row["geom"]
        if not isinstance(geom, dict) or geom.get("type") != "LineString":
            raise InvalidRow("geom must be a LineString", {"geom": ["LineString required"]})
        if len(line_positions(geom)) < 2:
            raise InvalidRow("geom needs at least two points", {"geom": ["at least two points"]})
    if kind in kinds.POINT_KINDS and "location" in row:
        loc = row["location"]
        if not isinstance(loc, dict) or loc.get("type") != "Point":
            raise InvalidRow("location must be a Point", {"location": ["Point required"]})


class DjangoGeoEntityStore(GeoEntityStore):
    """Django 모델 기반 저장소."""

    def load(self, kind):
        model, ordering, _ = _model_info(kind)
        try:
            return [obj.to_response() for obj in model.objects.all().order_by(*ordering)]
        except DatabaseError as e:
            raise StoreError(f"failed to load {kind}: {e}") from e

    def _get_obj(self, kind, pk):
        model, _, _ = _model_info(kind)
        try:
            return model.objects.get(pk=pk)
        except (model.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"{kind} {pk} not found")
        except DatabaseError as e:
            raise StoreError(f"failed to get {kind} {pk}: {e}") from e

    def _save(self, kind, obj):
        try:
            obj.full_clean()
        except ValidationError as e:
            raise InvalidRow(f"invalid {kind}", e.message_dict) from e
        try:
            with transaction.atomic():
                obj.save()
        except DatabaseError as e:
            raise StoreError(f"failed to save {kind}: {e}") from e
        return obj.to_response()

    def insert(self, kind, row):
        model, _, fields = _model_info(kind)
        unknown = set(row) - set(fields)
        if unknown:
            raise InvalidRow(f"unknown fields for {kind}: {sorted(unknown)}")
        validate_geometry(kind, row)
        saved = self._save(kind, model(**row))
        logger.info("inserted %s %s", kind, saved.get("id"))
        return saved

    def get(self, kind, pk):
        return self._get_obj(kind, pk).to_response()

    def update(self, kind, pk, changes):
        _, _, fields = _model_info(kind)
        obj = self._get_obj(kind, pk)
        changes = {k: v for k, v in changes.items() if k != "id"}
        unknown = set(changes) - set(fields)
        if unknown:
            raise InvalidRow(f"unknown fields for {kind}: {sorted(unknown)}")
        # 보행로 모양은 그리기 이후 바꾸지 않는다.
        if kind == kinds.FOOTWAY and "geom" in changes and changes["geom"] != obj.geom:
            raise InvalidRow("footway geometry is immutable", {"geom": ["immutable"]})
        validate_geometry(kind, changes)
        for field, value in changes.items():
            setattr(obj, field, value)
        saved = self._save(kind, obj)
        logger.info("updated %s %s (%s)", kind, pk, ", ".join(sorted(changes)))
        return saved

    def delete(self, kind, pk):
        obj = self._get_obj(kind, pk)
        try:
            obj.delete()
        except DatabaseError as e:
            raise StoreError(f"failed to delete {kind} {pk}: {e}") from e
        logger.info("deleted %s %s", kind, pk)

# campusmap/admin.py
"""
Django 관리자(admin) 사이트 설정.

- 캠퍼스 엔티티 5종을 관리자 페이지에서 조회/검색할 수 있도록 등록한다.
"""
from django.contrib import admin
from .models import Building, Entrance, Footway, Landmark, Parking


@admin.register(Building)
class BuildingAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "building_code", "total_floors", "state", "updated_at")
    list_filter = ("state",)
    search_fields = ("name", "building_code")
    ordering = ("name",)


@admin.register(Footway)
class FootwayAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "access_type", "state", "updated_at")
    list_filter = ("access_type", "state")
    search_fields = ("name",)
    # 최근 수정 순
    ordering = ("-updated_at",)


class PointEntityAdmin(admin.ModelAdmin):
    """출입구/주차장/랜드마크 공통 화면."""
    list_display = ("id", "name", "type", "building", "is_active", "updated_at")
    list_filter = ("type", "is_active")
    search_fields = ("name",)
    ordering = ("-updated_at",)


admin.site.register(Entrance, PointEntityAdmin)
admin.site.register(Landmark, PointEntityAdmin)


@admin.register(Parking)
class ParkingAdmin(PointEntityAdmin):
    list_display = ("id", "name", "type", "capacity", "building", "is_active", "updated_at")

"""
프로젝트 전역 URL 라우팅 설정.

- /admin/ : Django 기본 관리자 페이지 (캠퍼스 엔티티 조회/검색)
- /api/   : campusmap 앱에서 제공하는 API 엔드포인트(prefix: /api/)
"""

from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path('admin/', admin.site.urls),

    # /api/ 이하 URL은 campusmap.urls에서 처리
    # 예: /api/buildings/, /api/editor/click/ 등
    path('api/', include('campusmap.urls')),
]

# campusmap/apps.py
"""
Django 앱 설정 모듈.

- INSTALLED_APPS 에 'campusmap' 으로 등록해서 사용.
"""
import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class CampusMapConfig(AppConfig):
    """캠퍼스 지도 에디터용 'campusmap' 앱 설정."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'campusmap'
    verbose_name = "캠퍼스 지도"

    def ready(self):
        # 개발 중 앱 로딩 여부 확인용
        logger.debug("campusmap app ready")

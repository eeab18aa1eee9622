"""
테스트 전용 설정.

- 기본 설정을 그대로 가져오되 DB만 SQLite 메모리 DB로 바꾼다.
  (pytest-django가 DJANGO_SETTINGS_MODULE=config.settings_test 로 사용)
"""

from .settings import *  # noqa: F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

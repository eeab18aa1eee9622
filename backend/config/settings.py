"""
Django 프로젝트 전역 설정 파일.

- 캠퍼스 지도 관리 콘솔(campusmap) 백엔드 설정
- DB: MySQL (CampusMap 스키마), 접속 정보는 환경변수로 덮어쓸 수 있다.
- CORS: 개발 단계에서는 모든 오리진 허용 (지도 프론트엔드가 다른 포트에서 접근)
- CAMPUS_MAP: 지도 에디터(모드/스냅/뷰포트) 관련 상수
"""

import os
from pathlib import Path

# BASE_DIR: 프로젝트 루트 경로 (config/ 상위 디렉터리)
BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# 개발용 시크릿 키 (운영환경에서는 반드시 CAMPUS_SECRET_KEY 환경변수로 지정)
SECRET_KEY = os.environ.get("CAMPUS_SECRET_KEY", "dev-secret-key")

# DEBUG 모드
DEBUG = _env_bool("CAMPUS_DEBUG", True)

# 개발용으로는 모두 허용('*'), 운영에서는 콤마로 구분된 도메인 목록을 넘긴다.
ALLOWED_HOSTS = os.environ.get("CAMPUS_ALLOWED_HOSTS", "*").split(",")

# 설치된 앱 목록
INSTALLED_APPS = [
    # Django 기본 앱들
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    # 3rd party
    'corsheaders', # CORS(다른 도메인/포트에서 오는 요청) 허용을 위한 패키지
    # local
    'campusmap', # 캠퍼스 지도 에디터 (건물/보행로/출입구/주차장/랜드마크)
]

MIDDLEWARE = [
    # CORS 설정이 가장 먼저 적용되도록 최상단에 배치
    'corsheaders.middleware.CorsMiddleware',

    'django.middleware.security.SecurityMiddleware',
    # 에디터 상태(모드, A/B 점, 임시 초안)는 세션에 보관된다.
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',

    # API 뷰는 @csrf_exempt 로 열어둔다 (프론트엔드가 다른 포트에서 호출)
    'django.middleware.csrf.CsrfViewMiddleware',

    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

# 데이터베이스 설정 (MySQL)
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.mysql",
        "NAME": os.environ.get("CAMPUS_DB_NAME", "CampusMap"),
        "USER": os.environ.get("CAMPUS_DB_USER", "root"),
        "PASSWORD": os.environ.get("CAMPUS_DB_PASSWORD", "123456789"),
        "HOST": os.environ.get("CAMPUS_DB_HOST", "127.0.0.1"),
        "PORT": os.environ.get("CAMPUS_DB_PORT", "3306"),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# 캐시: 에디터 세션 잠금(campusmap.session)용.
# 워커가 여러 개여도 같은 잠금을 보도록 DB 캐시를 쓴다. (python manage.py createcachetable)
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.db.DatabaseCache",
        "LOCATION": "campusmap_cache",
    }
}

STATIC_URL = '/static/'


# ───────────── CORS 설정 ─────────────

# 개발 단계에서 모든 오리진의 요청 허용
CORS_ALLOW_ALL_ORIGINS = True
# 세션 쿠키(에디터 상태)를 교차 오리진 요청에도 실어 보내야 한다.
CORS_ALLOW_CREDENTIALS = True


# ───────────── 로깅 설정 ─────────────

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{levelname}] {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "campusmap": {
            "handlers": ["console"],
            "level": os.environ.get("CAMPUS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}


# ───────────── 지도 에디터 설정 ─────────────

CAMPUS_MAP = {
    # 지도 초기 중심 (UNEMI 캠퍼스) / 줌
    "CENTER": (-2.14898719, -79.60420553),
    "ZOOM": 18,
    # 타일 한 장의 픽셀 크기 (Leaflet/OSM 기본값)
    "TILE_SIZE": 256,
    # 클릭 위치를 기존 보행로 꼭짓점에 붙이는 픽셀 반경
    "SNAP_PX": 10,
}

"""
캠퍼스 지도 관리 콘솔 WSGI 진입점.

- gunicorn / uWSGI 등 동기 웹 서버가 `config.wsgi:application` 으로 로드한다.
- 에디터 API는 요청 하나에 상태 전이 하나를 처리하는 동기 뷰이므로 WSGI로 충분하다.
"""

import os
from django.core.wsgi import get_wsgi_application

# 다른 설정 모듈(예: config.settings_test)을 쓰려면 서버 환경변수로 덮어쓴다.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

application = get_wsgi_application()

#!/usr/bin/env python
"""
캠퍼스 지도 백엔드용 manage.py

예:
    python manage.py makemigrations campusmap
    python manage.py migrate
    python manage.py runserver
    python manage.py createsuperuser
"""

import os
import sys


def main():
    """DJANGO_SETTINGS_MODULE 기본값을 잡고 관리 커맨드를 실행한다."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Make sure it's installed and available on your PYTHONPATH."
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()

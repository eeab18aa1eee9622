# campusmap/urls.py
"""
campusmap 앱의 URL 라우팅 설정. (config/urls.py 에서 /api/ 아래에 연결)

크게 3가지 영역:
1) 헬스 체크
2) 지도 에디터 API  (/api/editor/...)
3) 엔티티 컬렉션 API (/api/<collection>/...)
"""
from django.urls import path
from . import views

urlpatterns = [
    # 응답: {"ok": true}
    path('ping/', views.ping),

    # -------------------------
    # 지도 에디터
    # -------------------------
    # 모든 응답은 같은 스냅샷 형태:
    #   {mode, banner, selection, ab, draft, modal_open, interactions,
    #    viewport, ops, events, notices}
    path('editor/', views.editor_state, name="editor_state"),
    path('editor/config/', views.editor_config, name="editor_config"),
    path('editor/mode/', views.editor_mode, name="editor_mode"),
    path('editor/selection/', views.editor_selection, name="editor_selection"),
    path('editor/viewport/', views.editor_viewport, name="editor_viewport"),
    path('editor/click/', views.editor_click, name="editor_click"),
    path('editor/overlay/', views.editor_overlay, name="editor_overlay"),
    path('editor/cancel/', views.editor_cancel, name="editor_cancel"),
    path('editor/modal/', views.editor_modal, name="editor_modal"),
    # PATCH(값 변경) / POST(저장) / DELETE(취소)
    path('editor/draft/', views.editor_draft, name="editor_draft"),

    # -------------------------
    # 엔티티 컬렉션
    # -------------------------
    # <name>: buildings | footways | entrances | parkings | landmarks
    # GET  /<name>/        → 전체 목록
    # POST /<name>/        → 생성 (건물은 addBuilding 위치 선택 후 건물 폼에서)
    path('<str:name>/', views.collection, name="collection"),

    # GET / PUT / PATCH / DELETE /<name>/<pk>/  → 편집 모달
    path('<str:name>/<int:pk>/', views.entity, name="entity"),
]

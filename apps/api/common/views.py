"""
공통 API 뷰
"""
from django.db import DatabaseError, connection
from django.http import JsonResponse

SERVICE_NAME = "examhall-api"


def health_check(request):
    """
    헬스체크 엔드포인트

    Returns:
        - 200: DB 연결 정상
        - 503: 데이터베이스 연결 실패
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        return JsonResponse({
            "status": "unhealthy",
            "service": SERVICE_NAME,
            "database": "disconnected",
            "error": str(e),
        }, status=503)

    return JsonResponse({
        "status": "healthy",
        "service": SERVICE_NAME,
        "database": "connected",
    }, status=200)

from django.db import connection, DatabaseError
from django.http import JsonResponse


def health_check(request):
    """Liveness check; reports whether the database answers."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError:
        return JsonResponse({'status': 'unhealthy', 'database': 'unavailable'}, status=503)
    return JsonResponse({'status': 'ok', 'database': 'ok'})


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'NOT_FOUND',
        'message': 'The requested resource was not found.'
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'INTERNAL_ERROR',
        'message': 'Internal server error.'
    }, status=500)

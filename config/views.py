from django.http import JsonResponse
from django.utils import timezone


def health_check(request):
    """Liveness probe for the hosting platform."""
    return JsonResponse({
        'status': 'OK',
        'timestamp': timezone.now().isoformat(),
    })


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)

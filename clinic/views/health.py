from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, connections
from django.db.migrations.executor import MigrationExecutor
from django.http import JsonResponse


def healthz(request):
    """Liveness plus readiness: database reachable and fully migrated."""
    try:
        connection = connections[DEFAULT_DB_ALIAS]
        executor = MigrationExecutor(connection)
        pending = executor.migration_plan(executor.loader.graph.leaf_nodes())
    except Exception as e:
        return JsonResponse({'ok': False, 'error': str(e)}, status=503)
    layer = settings.CHANNEL_LAYERS.get('default', {}).get('BACKEND', '')
    body = {
        'ok': not pending,
        'db': connection.vendor,
        'pendingMigrations': len(pending),
        'channelLayer': layer.rsplit('.', 1)[-1],
    }
    return JsonResponse(body, status=200 if not pending else 503)

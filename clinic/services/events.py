import logging
from typing import Any, Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

UPDATES_GROUP = "updates"


def _send(event: Dict[str, Any]) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(UPDATES_GROUP, event)


def broadcast_on_commit(kind: str, payload: Dict[str, Any]) -> None:
    """Push ``payload`` to WebSocket subscribers once the current transaction commits."""
    event = {"type": "broadcast.update", "kind": kind, "ts": timezone.now().isoformat(), "data": payload}
    logger.debug("Queueing %s broadcast", kind)
    transaction.on_commit(lambda: _send(event))

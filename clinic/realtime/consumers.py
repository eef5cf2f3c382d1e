import json
from urllib.parse import parse_qs

from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.services.events import UPDATES_GROUP


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes scheduling and billing events to signed-in staff.

    Clients may narrow the stream with ``?kinds=invoice.generated,...``.
    """
    GROUP = UPDATES_GROUP

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close(code=4401)
            return
        query = parse_qs(self.scope.get("query_string", b"").decode())
        self.kinds = {k for raw in query.get("kinds", []) for k in raw.split(",") if k}
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "subscribed", "kinds": sorted(self.kinds)}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def broadcast_update(self, event):
        # event: {"type": "broadcast.update", "kind": "appointment.completed", "ts": "...", "data": {...}}
        if self.kinds and event.get("kind") not in self.kinds:
            return
        await self.send(json.dumps({"kind": event["kind"], "ts": event["ts"], "data": event["data"]}))

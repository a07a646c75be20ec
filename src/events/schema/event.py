from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema

from events.models import Event


class MinimalEventSchema(ModelSchema):
    id: UUID
    event_type: Event.EventType
    status: Event.EventStatus
    price: Decimal

    class Meta:
        model = Event
        fields = ["id", "name", "venue", "start", "end", "event_type", "status", "price"]

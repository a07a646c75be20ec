"""Schema for accounts module."""

from ninja import ModelSchema
from pydantic import UUID4

from .models import FelicityUser


class FelicityUserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = FelicityUser
        fields = ["email", "first_name", "last_name", "role"]


class MinimalFelicityUserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = FelicityUser
        fields = ["email"]

from datetime import datetime
from pydantic import BaseModel, Field
from typing import List

from shareit.domain import ItemRequestDetails
from shareit.schemas.item import ItemOut

class ItemRequestIn(BaseModel):
    description: str = Field(min_length=1)

class ItemRequestOut(BaseModel):
    id: int
    description: str
    requestorId: int
    created: datetime
    items: List[ItemOut] = []

    @classmethod
    def from_domain(cls, d: ItemRequestDetails) -> "ItemRequestOut":
        return cls(
            id=d.request.id,
            description=d.request.description,
            requestorId=d.request.requestor_id,
            created=d.request.created,
            items=[ItemOut.from_item(i) for i in d.items],
        )

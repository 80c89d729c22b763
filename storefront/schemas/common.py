"""Shared schema base"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema that reads and writes camelCase JSON keys (mobile client wire format)"""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_record(self) -> dict:
        """Plain JSON-compatible dict, as stored and sent over the wire"""
        return self.model_dump(mode="json", by_alias=True)


class MessageResponse(BaseModel):
    message: str

"""Catalog schemas."""

from pydantic import BaseModel


class LookupItem(BaseModel):
    """Option for a select input. Ids are strings so form values bind directly."""

    id: str
    name: str

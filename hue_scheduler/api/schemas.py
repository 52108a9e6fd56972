from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional, List


class ParseRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)


class TimeWindowOut(BaseModel):
    start: str
    end: str


class ParseResponse(BaseModel):
    display_name: str
    windows: List[TimeWindowOut]
    is_attached: bool
    error: Optional[str] = None


class SimReachableRequest(BaseModel):
    reachable: bool

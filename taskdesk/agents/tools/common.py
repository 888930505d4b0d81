"""Argument model shared by tools that take no parameters."""

from pydantic import BaseModel


class NoArgs(BaseModel):
    pass

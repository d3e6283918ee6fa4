"""Name generation Pydantic models."""
from pydantic import BaseModel, Field


class NameRequest(BaseModel):
    race: str = Field("human", description="Character race, e.g. 'elf'")
    gender: str = Field("male", description="Character gender")


class NameResponse(BaseModel):
    name: str

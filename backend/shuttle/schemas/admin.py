from pydantic import BaseModel, Field


class BusCreate(BaseModel):
    name: str = Field(min_length=1)
    total_rep: int = Field(default=0, ge=0)


class BusUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    total_rep: int | None = Field(default=None, ge=0)


class DriverOut(BaseModel):
    model_config = {"from_attributes": True}

    user_id: int
    username: str
    email: str
    bus_id: int | None = None


class DriverCreate(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    bus_id: int | None = None


class DriverUpdate(BaseModel):
    username: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    bus_id: int | None = None

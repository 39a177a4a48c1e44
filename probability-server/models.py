from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RawValues(BaseModel):
    """Monthly inputs the percentages were computed from; None when the source had no value."""

    model_config = ConfigDict(populate_by_name=True)

    temperature: float | None = Field(None, alias="T2M")
    humidity: float | None = Field(None, alias="RH2M")
    precipitation: float | None = Field(None, alias="PRECTOT")
    wind_speed: float | None = Field(None, alias="WS10M")


class ProbabilityResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    month: int = Field(..., ge=1, le=12)
    very_hot: int = Field(..., ge=0, le=100)
    very_cold: int = Field(..., ge=0, le=100)
    very_windy: int = Field(..., ge=0, le=100)
    very_humid: int = Field(..., ge=0, le=100)
    very_uncomfortable: int = Field(..., ge=0, le=100)
    rainy: int = Field(..., ge=0, le=100)
    raw: RawValues


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    upstream: str

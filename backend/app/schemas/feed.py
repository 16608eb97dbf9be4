"""
Upstream feed schemas.

Field aliases follow the feed's wire format (Spanish keys); attribute names
are used everywhere else. Every field except the plot id has a default so a
partial upstream record still yields a structurally complete snapshot.
"""
from datetime import datetime, timezone
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator, model_validator

UNKNOWN_LOCATION = "Ubicación desconocida"
NO_RESPONSIBLE = "Sin responsable"
UNSPECIFIED_CROP = "Sin especificar"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _number_or_zero(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class FeedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SensorReading(FeedModel):
    temperature: float = Field(0.0, alias="temperatura")
    humidity: float = Field(0.0, alias="humedad")

    @field_validator("temperature", "humidity", mode="before")
    @classmethod
    def default_to_zero(cls, v):
        return _number_or_zero(v)


class WeatherReading(FeedModel):
    temperature: float = Field(0.0, alias="temperatura")
    humidity: float = Field(0.0, alias="humedad")
    rain: float = Field(0.0, alias="lluvia")
    sun: float = Field(0.0, alias="sol")

    @field_validator("temperature", "humidity", "rain", "sun", mode="before")
    @classmethod
    def default_to_zero(cls, v):
        return _number_or_zero(v)


class FeedPlot(FeedModel):
    id: int
    name: str = Field(alias="nombre")
    location: str = Field(UNKNOWN_LOCATION, alias="ubicacion")
    responsible: str = Field(NO_RESPONSIBLE, alias="responsable")
    crop_type: str = Field(UNSPECIFIED_CROP, alias="tipo_cultivo")
    last_irrigation: datetime = Field(default_factory=utcnow, alias="ultimo_riego")
    sensor: SensorReading = Field(default_factory=SensorReading)

    @model_validator(mode="before")
    @classmethod
    def fill_missing(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Placeholder name derived from the id stays stable across polls
        if not data.get("nombre") and not data.get("name"):
            data["nombre"] = f"Parcela {data.get('id')}"
        for key in ("ubicacion", "responsable", "tipo_cultivo", "ultimo_riego", "sensor"):
            if key in data and not data[key]:
                del data[key]
        return data

    @field_validator("id", mode="before")
    @classmethod
    def reject_bool_id(cls, v):
        if isinstance(v, bool):
            raise ValueError("plot id must be an integer")
        return v

    @field_validator("name", "location", "responsible", "crop_type", mode="before")
    @classmethod
    def text_or_default(cls, v, info: ValidationInfo):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str) and v.strip():
            return v
        if info.field_name == "name":
            return f"Parcela {info.data.get('id')}"
        return cls.model_fields[info.field_name].default

    @field_validator("last_irrigation", mode="wrap")
    @classmethod
    def unparseable_irrigation_is_now(cls, v, handler):
        try:
            value = handler(v)
        except ValidationError:
            return utcnow()
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("sensor", mode="before")
    @classmethod
    def sensor_must_be_mapping(cls, v):
        return v if isinstance(v, (dict, SensorReading)) else {}


class FeedSnapshot(FeedModel):
    weather: WeatherReading = Field(default_factory=WeatherReading, alias="sensores")
    plots: List[FeedPlot] = Field(default_factory=list, alias="parcelas")
    fetched_at: datetime = Field(default_factory=utcnow)
    is_fallback: bool = False


def default_snapshot() -> FeedSnapshot:
    """Snapshot served when the feed cannot be read."""
    return FeedSnapshot(
        weather=WeatherReading(temperature=25, humidity=60, rain=0, sun=80),
        plots=[
            FeedPlot(
                id=1,
                name="Parcela Muestra 1",
                location="Cancún",
                responsible="Juan Pérez",
                crop_type="Maíz",
                sensor=SensorReading(temperature=28, humidity=65),
            )
        ],
        is_fallback=True,
    )

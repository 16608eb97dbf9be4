"""All SQLAlchemy models – re-exported for metadata creation and app use."""

from app.models.user import User
from app.models.reference import Location, CropType
from app.models.plot import Plot, ArchivedPlot
from app.models.timeseries import SensorSample, WeatherReading, SAMPLE_KINDS

__all__ = [
    "User",
    "Location", "CropType",
    "Plot", "ArchivedPlot",
    "SensorSample", "WeatherReading", "SAMPLE_KINDS",
]

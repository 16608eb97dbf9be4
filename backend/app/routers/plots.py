"""Active plots, archived plots and historical readings."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth import get_current_user
from app.database import get_db
from app.models import User
from app.schemas import ArchivedPlotResponse, PlotResponse, SensorSampleResponse, WeatherReadingResponse
from app.services.plot_store import PlotStore

router = APIRouter(
    prefix="/plots",
    tags=["plots"],
    dependencies=[Depends(get_current_user)],
)

weather_router = APIRouter(
    prefix="/weather",
    tags=["weather"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[PlotResponse])
def list_active_plots(db: Session = Depends(get_db)):
    """List plots currently reported by the feed."""
    return PlotStore(db).read_active()


@router.get("/archived", response_model=List[ArchivedPlotResponse])
def list_archived_plots(db: Session = Depends(get_db)):
    """List archived plots, most recently deleted first."""
    return PlotStore(db).list_archived()


@router.get("/history", response_model=List[SensorSampleResponse])
def list_sensor_history(
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Latest sensor samples, newest first."""
    rows = PlotStore(db).list_samples(limit=limit)
    return [
        SensorSampleResponse(
            id=sample.id,
            plot_id=sample.plot_id,
            kind=sample.kind,
            value=sample.value,
            timestamp=sample.timestamp,
            plot_name=plot_name,
            location_name=location_name,
        )
        for sample, plot_name, location_name in rows
    ]


@weather_router.get("", response_model=List[WeatherReadingResponse])
def list_weather(
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Latest global weather readings, newest first."""
    return PlotStore(db).list_weather(limit=limit)

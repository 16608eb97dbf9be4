"""Dashboard state and manual refresh."""
from dataclasses import asdict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.auth import get_current_user
from app.database import get_db
from app.models import User
from app.schemas import ArchivedPlotResponse, DashboardResponse, PollResultResponse
from app.services.plot_store import PlotStore

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    request: Request,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    """
    Last good snapshot plus the archived plots.

    While the first poll is pending `loading` is true; once the startup
    timeout passes the default snapshot is returned instead.
    """
    view = request.app.state.poller.view()
    archived = [ArchivedPlotResponse.model_validate(row) for row in PlotStore(db).list_archived()]
    return DashboardResponse(
        state=view.state.value,
        loading=view.loading,
        snapshot=view.snapshot,
        last_update=view.last_update,
        error=view.error,
        archived=archived,
    )


@router.post("/refresh", response_model=PollResultResponse)
def refresh(request: Request, _current_user: User = Depends(get_current_user)):
    """Run a poll cycle now."""
    result = request.app.state.poller.run_once(trigger="manual")
    return PollResultResponse(**asdict(result))

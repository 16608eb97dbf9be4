from app.routers.auth import router as auth_router
from app.routers.dashboard import router as dashboard_router
from app.routers.plots import router as plots_router, weather_router

__all__ = ["auth_router", "dashboard_router", "plots_router", "weather_router"]

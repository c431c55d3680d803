from fastapi import FastAPI
from valorant_dashboard.api.account_routes import create_account_router
from valorant_dashboard.api.auth_routes import create_auth_router
from valorant_dashboard.api.exceptions import (
    DashboardException,
    dashboard_exception_handler,
    general_exception_handler
)

app = FastAPI(
    title="Valorant Dashboard",
    description="Riot account authentication and multi-account session management",
    version="0.1.0"
)

app.add_exception_handler(DashboardException, dashboard_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(create_auth_router())
app.include_router(create_account_router())


@app.get("/")
async def root():
    return {
        "service": "Valorant Dashboard",
        "version": "0.1.0",
    }

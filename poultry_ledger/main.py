from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from poultry_ledger.common.error_handlers import register_error_handlers
from poultry_ledger.core.config import settings
from poultry_ledger.api.v1 import account, group, report

app = FastAPI(title=settings.APP_TITLE, version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(group.router, prefix="/api/v1/groups", tags=["groups"])
app.include_router(
    account.router, prefix="/api/v1/accounts", tags=["accounts"])
app.include_router(
    report.router, prefix="/api/v1/reports", tags=["reports"])


@app.get("/")
def read_root():
    return {"message": "Welcome to the Poultry Ledger APIs!"}

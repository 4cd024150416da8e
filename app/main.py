from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from app.api.v1.auth.router import router as auth_router
from app.api.v1.users.router import router as users_router
from app.api.v1.debt_concepts.router import router as debt_concepts_router
from app.api.v1.grades.router import router as grades_router
from app.api.v1.students.router import router as students_router
from app.api.v1.guardians.router import router as guardians_router
from app.api.v1.debts.router import router as debts_router
from app.api.v1.payment_plans.router import router as payment_plans_router
from app.api.v1.payments.router import router as payments_router
from app.api.v1.parent.router import router as parent_router
from app.api.v1.dashboard.router import router as dashboard_router
from app.core.exceptions import BackendUnavailableError
from app.core.logger import log


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(f"Database error on {request.method} {request.url.path}: {exc}")
    err = BackendUnavailableError()
    return JSONResponse(status_code=err.status_code, content={"detail": err.message})


def create_app() -> FastAPI:
    app = FastAPI(title="School Ledger Backend")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(InterfaceError, database_unavailable_handler)

    # Routers
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(debt_concepts_router)
    app.include_router(grades_router)
    app.include_router(students_router)
    app.include_router(guardians_router)
    app.include_router(debts_router)
    app.include_router(payment_plans_router)
    app.include_router(payments_router)
    app.include_router(parent_router)
    app.include_router(dashboard_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    log.info("School ledger API initialised")
    return app


app = create_app()

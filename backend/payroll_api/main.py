from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_api.api.routes import health
from payroll_api.core.config import settings
from payroll_api.core.errors import PayrollError
from payroll_api.core.logging import configure_logging, get_logger
from payroll_api.core.monitoring import configure_error_monitoring
from payroll_api.core.observability import configure_observability
from payroll_api.domains.payroll.router import router as payroll_router

configure_logging(settings.log_level, json_logs=settings.log_json)
configure_observability()
configure_error_monitoring()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(payroll_router)


@app.exception_handler(PayrollError)
def handle_payroll_error(request: Request, exc: PayrollError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("payroll_request_failed", path=request.url.path, status=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
def startup_event() -> None:
    logger.info("startup_complete", env=settings.env)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Payroll Lifecycle API running", "environment": settings.env}

import sentry_sdk

from payroll_api.core.config import settings


def configure_error_monitoring() -> None:
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.env,
            traces_sample_rate=0.2,
            send_default_pii=False,
        )


def record_batch_failure(company_id: str, employee_id: str, message: str) -> None:
    """Leave a breadcrumb so a later error event shows which employees failed."""
    sentry_sdk.add_breadcrumb(
        category="payroll.batch",
        message=message,
        level="warning",
        data={"company_id": company_id, "employee_id": employee_id},
    )

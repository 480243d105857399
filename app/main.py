import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from services.access_control import AccessDeniedError
from services.client_service import DuplicatePhoneError
from services.validators import FormValidationError

from .api.router import router as api_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Studio Desk API")
app.include_router(api_router, prefix="/api")


@app.exception_handler(AccessDeniedError)
def access_denied_handler(request: Request, exc: AccessDeniedError):
    logger.warning("⛔ %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(LookupError)
def not_found_handler(request: Request, exc: LookupError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(DuplicatePhoneError)
def duplicate_phone_handler(request: Request, exc: DuplicatePhoneError):
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "contact_number": exc.contact_number,
            "existing_client_id": exc.existing.id if exc.existing else None,
        },
    )


@app.exception_handler(FormValidationError)
def form_error_handler(request: Request, exc: FormValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


@app.exception_handler(ValueError)
def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/ping")
def ping():
    return {"message": "pong"}

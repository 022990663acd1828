from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.requests import Request
from app.api.loan_routes import router as loan_router
from app.core.config import settings
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
import logging
import traceback

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)

ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

allowed_origins = settings.allowed_origins()


# Static CORS headers attached to every response when the wildcard origin is configured
def cors_headers() -> dict:
    headers = {"Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS)}
    if "*" in allowed_origins:
        headers["Access-Control-Allow-Origin"] = "*"
    return headers


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds the permissive CORS headers to every response, including error
    responses and requests sent without an Origin header.

    Browser preflights (OPTIONS with Origin and Access-Control-Request-Method)
    are answered by CORSMiddleware, which is registered last and therefore
    runs first. Any other OPTIONS request is answered here with 204.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=cors_headers())

        response = await call_next(request)
        for key, value in cors_headers().items():
            response.headers[key] = value
        return response


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Simulated CIBIL scoring and loan eligibility checks",
    version="1.0.0"
)


logger = logging.getLogger("server_exception_handler")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    body = {
        "error": "HTTP error",
        "details": str(exc.detail) if exc.detail else str(exc.status_code)
    }
    logger.warning(f"HTTPException handled: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=body, headers=cors_headers())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Body/query validation errors raised by FastAPI before a route runs
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    logger.warning(f"Validation error: {details}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid input", "details": details},
        headers=cors_headers()
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Runs outside the middleware stack, so CORS headers are attached here
    tb = traceback.format_exc()
    logger.error(f"Unhandled exception: {str(exc)}\n{tb}")
    body = {
        "error": "Internal server error",
        "details": str(exc) or "Unknown error occurred"
    }
    return JSONResponse(status_code=500, content=body, headers=cors_headers())


# Middleware execution order is LIFO: CORSMiddleware is added last so it sees
# browser preflights before CORSHeadersMiddleware short-circuits OPTIONS.
app.add_middleware(CORSHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=ALLOWED_HEADERS,
    max_age=3600,
)

app.include_router(loan_router)

@app.get("/")
async def root():
    return {"message": "Loan Eligibility API is running!"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "message": "API is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)

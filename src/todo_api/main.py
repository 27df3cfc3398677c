from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .logging_utils import configure_logging
from .routers import todos as todos_router
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "todos",
        "description": "Todo management: CRUD, completion toggling, filtering by status or priority, and title search.",
    },
]

_settings = get_settings()
configure_logging(_settings.log_level)

app = FastAPI(
    title="Todo App API",
    description="RESTful API for managing todos with priority levels and completion tracking",
    version="1.0.0",
    openapi_tags=openapi_tags,
    contact={"name": "Todo App Team", "email": "support@todoapp.com"},
    license_info={"name": "MIT License", "url": "https://opensource.org/licenses/MIT"},
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _field_errors(errors: List[Dict[str, Any]]) -> Dict[str, str]:
    """
    Map each failing field (dotted location without the 'body' prefix) to its first message.

    Errors not tied to a named field, such as malformed JSON reported at a
    character offset, are keyed as "request".
    """
    fields: Dict[str, str] = {}
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in {"body", "path", "query"}:
            loc = loc[1:]
        key = ".".join(str(p) for p in loc) if loc and isinstance(loc[0], str) else "request"
        fields.setdefault(key, err.get("msg", "Invalid value"))
    return fields


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent 400 JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "message": "Request validation failed",
            "errors": {"title": "..."},
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "errors": _field_errors(list(errors)),
            "detail": jsonable_encoder(errors),
        },
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


app.include_router(todos_router.router)

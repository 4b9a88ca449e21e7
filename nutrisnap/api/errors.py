"""
Exception handlers - Render every API error as a JSON body with `mensagem`.

Routes raise HTTPException with either a plain message or a dict body
(for extra keys such as `acao` or `valido`). Request validation failures
become 400 with itemized `detalhes`.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


def _describe(error: dict) -> str:
    field = error["loc"][-1] if error.get("loc") else "body"
    return f"{field}: {error['msg']}"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = exc.detail if isinstance(exc.detail, dict) else {"mensagem": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "mensagem": "Dados inválidos",
            "detalhes": [_describe(error) for error in exc.errors()],
        },
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

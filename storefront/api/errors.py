# storefront/api/errors.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.domain.errors import (
    AuthenticationRequired,
    CancellationWindowClosedError,
    CartRejectedError,
    EmptyCartError,
    ForbiddenError,
    InactiveError,
    InsufficientCapacityError,
    InvalidTransitionError,
    NotFoundError,
    ShopError,
    TransientStorageFailure,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# most specific first: CancellationWindowClosedError is an InvalidTransitionError
STATUS_CODES = [
    (NotFoundError, 404),
    (InactiveError, 400),
    (InsufficientCapacityError, 400),
    (CancellationWindowClosedError, 422),
    (InvalidTransitionError, 409),
    (ForbiddenError, 403),
    (AuthenticationRequired, 401),
    (EmptyCartError, 422),
    (CartRejectedError, 400),
    (TransientStorageFailure, 503),
]


def status_code_for(exc: ShopError) -> int:
    for error_type, code in STATUS_CODES:
        if isinstance(exc, error_type):
            return code
    return 400


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ShopError)
    async def _shop_error(req: Request, exc: ShopError):
        code = status_code_for(exc)
        if code >= 500:
            logger.error(f"{req.method} {req.url.path} -> {code}: {exc.message}")
        else:
            logger.info(f"{req.method} {req.url.path} -> {code}: {exc.message}")

        content = {"message": exc.message}
        if isinstance(exc, InsufficientCapacityError) and exc.available is not None:
            content["available"] = exc.available
        return JSONResponse(status_code=code, content=content)

    @app.exception_handler(ValueError)
    async def _value_error(req: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"message": str(exc)})

from typing import List, Dict, Union
from pydantic import ValidationError as PydanticValidationError
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from context_manager.context import context_user_data
from logger import logger
from utils.exceptions import ShippingError


# format the validation errors into our desired output
def format_validation_errors(errors: List[dict]) -> Dict:
    formatted_errors = {}

    for error in errors:
        # Extract the field name and error message
        field = error["loc"][-1] if len(error["loc"]) > 1 else "Unknown"
        message = error["msg"]

        # Add to the formatted_errors dictionary
        if field in formatted_errors:
            formatted_errors[field].append(message)
        else:
            formatted_errors[field] = [message]

    # Construct the final response format
    return {
        "data": {"fields": formatted_errors},
        "message": "Validation error occurred.",
        "status": False,
    }


async def handle_validation_error(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    return JSONResponse(status_code=422, content=format_validation_errors(exc.errors()))


# domain errors raised by the core are rendered in the generic response shape
async def handle_shipping_error(request: Request, exc: ShippingError) -> JSONResponse:
    if int(exc.status_code) >= 500:
        logger.error(
            extra=context_user_data.get(),
            msg=f"{exc.code} on {request.url.path}: {exc.message}",
        )
    else:
        logger.info(
            extra=context_user_data.get(),
            msg=f"{exc.code} on {request.url.path}: {exc.message}",
        )

    return JSONResponse(
        status_code=int(exc.status_code),
        content={
            "status": False,
            "message": exc.message,
            "data": jsonable_encoder({"code": exc.code, "details": exc.data}),
        },
    )


# Custom internal server error handler
async def custom_http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    if exc.status_code == 500:
        logger.error(f"Internal server error: {exc.detail}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "An internal server error occurred. Please try again later."
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )

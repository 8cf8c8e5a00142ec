from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from schema.base import GenericResponseModel

from context_manager.context import context_user_data

from logger import logger


# build a proper api response from the Generic response sent to it
def build_api_response(generic_response: GenericResponseModel) -> JSONResponse:
    response_json = jsonable_encoder(generic_response)

    # status_code travels as the HTTP status, not in the body
    response_json.pop("status_code", None)

    logger.info(
        extra=context_user_data.get(),
        msg="build_api_response: Generated Response with status_code:"
        + f"{generic_response.status_code}",
    )

    return JSONResponse(status_code=generic_response.status_code, content=response_json)

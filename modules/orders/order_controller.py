import http
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from context_manager.context import get_seller_id, get_services
from limiter import limiter

# schema
from schema.base import GenericResponseModel
from .order_schema import OrderRequestModel

# utils
from utils.response_handler import build_api_response


# Creating the router for orders
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post(
    "/quote",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def quote_order(
    order_data: OrderRequestModel,
    seller_id: int = Depends(get_seller_id),
    services=Depends(get_services),
):
    comparison = await services.order_binding.quote(seller_id, order_data)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=comparison,
            message="successfull",
        )
    )


@order_router.post(
    "",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
)
@limiter.limit("20/1second")
async def create_order(
    request: Request,
    order_data: OrderRequestModel,
    seller_id: int = Depends(get_seller_id),
    services=Depends(get_services),
):
    result = await services.order_binding.book(seller_id, order_data)

    if result.error is not None and not result.succeeded:
        return build_api_response(
            GenericResponseModel(
                status_code=result.error.status_code,
                status=False,
                data=result,
                message=result.error.message,
            )
        )

    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.CREATED,
            status=True,
            data=result,
            message="Order created successfully",
        )
    )


@order_router.post(
    "/{order_uuid}/cancel",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def cancel_order(
    order_uuid: UUID,
    seller_id: int = Depends(get_seller_id),
    services=Depends(get_services),
):
    cancellation = await services.order_binding.cancel(seller_id, order_uuid)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=cancellation,
            message="Order cancelled successfully",
        )
    )

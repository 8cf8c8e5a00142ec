import http
from uuid import UUID

from fastapi import APIRouter, Depends

from context_manager.context import get_seller_id, get_services

# schema
from schema.base import GenericResponseModel

# utils
from utils.response_handler import build_api_response


# Creating the router for shipments
shipment_router = APIRouter(prefix="/shipment", tags=["shipments"])


@shipment_router.post(
    "/{order_uuid}/assign-awb",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def assign_awb(
    order_uuid: UUID,
    seller_id: int = Depends(get_seller_id),
    services=Depends(get_services),
):
    shipment = await services.shipments.assign_awb(seller_id, order_uuid)
    manual = shipment.booking.requires_manual_booking
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=shipment,
            message=(
                "Courier booking failed, shipment queued for manual booking"
                if manual
                else "AWB assigned successfully"
            ),
        )
    )


@shipment_router.get(
    "/track/{awb_number}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
async def track_shipment(awb_number: str, services=Depends(get_services)):
    tracking = await services.shipments.track(awb_number)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=tracking,
            message="Tracking successfull",
        )
    )

import asyncio
import http

from fastapi import APIRouter, Depends, Request

from context_manager.context import get_services
from limiter import limiter

# schema
from schema.base import GenericResponseModel
from modules.rate_quote.rate_quote_schema import RateCalculatorParamsModel, ShipmentParamsModel
from modules.zone.zone_schema import (
    ZoneMappingRequestModel,
    ZoneRequestModel,
    ZoneResponseModel,
)
from .serviceability_schema import RateCompareRequestModel

# utils
from utils.response_handler import build_api_response


serviceability_router = APIRouter(tags=["serviceability"], prefix="/rates")


@serviceability_router.post(
    "/zone",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def get_zone(
    zone_params: ZoneRequestModel,
    services=Depends(get_services),
):
    zone = services.zone_resolver.resolve(
        zone_params.pickup_pincode, zone_params.delivery_pincode
    )
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=ZoneResponseModel(
                pickup_pincode=zone_params.pickup_pincode,
                delivery_pincode=zone_params.delivery_pincode,
                zone=zone,
            ),
            message="Zone calculated successfully",
        )
    )


@serviceability_router.post(
    "/zone-mapping",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def get_zone_mapping(
    mapping_params: ZoneMappingRequestModel,
    services=Depends(get_services),
):
    mapping = services.zone_resolver.zone_mapping(
        mapping_params.pickup_pincode, mapping_params.delivery_pincodes
    )
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=mapping,
            message="successfull",
        )
    )


@serviceability_router.post(
    "/calculate",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def calculate_rate(
    rate_params: RateCalculatorParamsModel,
    services=Depends(get_services),
):
    zone = services.zone_resolver.resolve(rate_params.pickup_pincode, rate_params.delivery_pincode)

    quote = services.rate_quote.quote_shipment(
        rate_params.courier,
        rate_params.mode,
        ShipmentParamsModel(zone=zone, **rate_params.model_dump(exclude={"courier"})),
    )
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=quote,
            message="Rate calculated successfully",
        )
    )


@serviceability_router.post(
    "/compare",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
@limiter.limit("20/1second")
async def compare_rates(
    request: Request,
    compare_params: RateCompareRequestModel,
    services=Depends(get_services),
):
    zone = await asyncio.to_thread(
        services.zone_resolver.resolve,
        compare_params.pickup_pincode,
        compare_params.delivery_pincode,
    )

    comparison = await services.comparison.compare(
        ShipmentParamsModel(zone=zone, **compare_params.model_dump())
    )
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=comparison,
            message="successfull",
        )
    )

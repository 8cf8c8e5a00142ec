import http
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from context_manager.context import get_services

# schema
from schema.base import GenericResponseModel
from schema.enums import ServiceMode, Zone
from .rate_card_schema import RateCardFilterModel, RateCardInsertModel, RateCardUpdateModel

# utils
from utils.response_handler import build_api_response


rate_card_router = APIRouter(tags=["rate cards"], prefix="/admin/rate-cards")


@rate_card_router.get(
    "",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def list_rate_cards(
    courier: Optional[str] = None,
    zone: Optional[Zone] = None,
    mode: Optional[ServiceMode] = None,
    rate_band: Optional[str] = None,
    active_only: bool = True,
    services=Depends(get_services),
):
    rate_cards = services.rate_cards.list_rate_cards(
        RateCardFilterModel(
            courier=courier,
            zone=zone,
            mode=mode,
            rate_band=rate_band,
            active_only=active_only,
        )
    )
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=rate_cards,
            message="successfull",
        )
    )


@rate_card_router.post(
    "",
    status_code=http.HTTPStatus.CREATED,
    response_model=GenericResponseModel,
)
def create_rate_card(
    rate_card_params: RateCardInsertModel,
    services=Depends(get_services),
):
    rate_card = services.rate_cards.create_rate_card(rate_card_params)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.CREATED,
            status=True,
            data=rate_card,
            message="Rate card created successfully",
        )
    )


@rate_card_router.put(
    "/{rate_card_uuid}",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def update_rate_card(
    rate_card_uuid: UUID,
    rate_card_params: RateCardUpdateModel,
    services=Depends(get_services),
):
    rate_card = services.rate_cards.update_rate_card(rate_card_uuid, rate_card_params)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=rate_card,
            message="Rate card updated successfully",
        )
    )


@rate_card_router.post(
    "/{rate_card_uuid}/deactivate",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def deactivate_rate_card(
    rate_card_uuid: UUID,
    services=Depends(get_services),
):
    rate_card = services.rate_cards.deactivate_rate_card(rate_card_uuid)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=rate_card,
            message="Rate card deactivated",
        )
    )

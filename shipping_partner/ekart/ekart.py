from typing import Dict

from cachetools import TTLCache
from dateutil.parser import parse

from logger import logger

# schema
from schema.enums import BookingType, ServiceMode
from ..provider_schema import (
    BookingRequestModel,
    BookingResultModel,
    CancellationResultModel,
    ServiceabilityModel,
    TrackingEventModel,
    TrackingResultModel,
)

from ..base import RateCardProviderAdapter
from utils.exceptions import ProviderUnavailable

# data
from .status_mapping import status_mapping


ERROR_KEYS = ("failed", "unauthorised", "forbidden")


class Ekart(RateCardProviderAdapter):

    slug = "ekart"
    name = "Ekart"
    mode = ServiceMode.SURFACE

    # API URL'S
    token_url = "https://api.ekartlogistics.com/auth/token"
    serviceability_url = "https://api.ekartlogistics.com/v2/serviceability/"
    create_order_url = "https://api.ekartlogistics.com/v2/shipments/create"
    track_order_url = "https://api.ekartlogistics.com/v2/shipments/track"
    cancel_order_url = "https://api.ekartlogistics.com/v3/shipments/rto/create"
    tracking_page_url = "https://ekartlogistics.com/shipmenttrack/"

    TOKEN_TTL = 60 * 30

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._token_cache = TTLCache(maxsize=1, ttl=self.TOKEN_TTL)

    def _raise_for_error(self, response_data: dict, action: str):
        for key in ERROR_KEYS:
            if response_data.get(key):
                logger.error(msg=f"Ekart {action} failed: {response_data[key]}")
                raise ProviderUnavailable(self.slug, str(response_data[key]))

    async def get_token(self) -> str:
        token = self._token_cache.get("token")
        if token:
            return token

        response_data = await self.request_json(
            "POST",
            self.token_url,
            headers={
                "Authorization": self.credentials.get("token") or "",
                "Content-Type": "application/json",
                "HTTP_X_MERCHANT_CODE": self.credentials.get("client_code") or "",
            },
        )
        self._raise_for_error(response_data, "get_token")

        token = response_data.get("Authorization")
        if not token:
            raise ProviderUnavailable(self.slug, "Unable to authenticate with Ekart")

        self._token_cache["token"] = token
        return token

    async def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": await self.get_token(),
            "Content-Type": "application/json",
            "HTTP_X_MERCHANT_CODE": self.credentials.get("client_code") or "",
        }

    async def check_serviceability(self, pincode: str) -> ServiceabilityModel:
        response_data = await self.request_json(
            "GET", self.serviceability_url + pincode, headers=await self._headers()
        )
        self._raise_for_error(response_data, "check_serviceability")

        details = response_data.get("response") or {}
        if not details:
            return ServiceabilityModel(pincode=pincode, serviceable=False)

        return ServiceabilityModel(
            pincode=pincode,
            serviceable=bool(details.get("forward_drop")),
            cod_available=bool(details.get("cod")),
            pickup_available=bool(details.get("forward_pickup")),
            details=details,
        )

    async def create_shipment(self, details: BookingRequestModel) -> BookingResultModel:
        body = {
            "client_name": self.credentials.get("client_code"),
            "services": [
                {
                    "service_code": "REGULAR",
                    "service_details": [
                        {
                            "service_leg": "FORWARD",
                            "service_data": {
                                "amount_to_collect": (
                                    float(details.cod_amount) if details.is_cod else 0
                                ),
                                "payment_channel": "COD" if details.is_cod else "PREPAID",
                                "source": {
                                    "address": {
                                        "first_name": details.seller_name,
                                        "pincode": details.pickup_pincode,
                                    }
                                },
                                "destination": {
                                    "address": {
                                        "first_name": details.consignee_name,
                                        "address_line1": details.consignee_address,
                                        "pincode": details.delivery_pincode,
                                        "city": details.consignee_city,
                                        "state": details.consignee_state,
                                        "primary_contact_number": details.consignee_phone,
                                    }
                                },
                            },
                            "shipment": {
                                "client_reference_id": details.order_number,
                                "shipment_value": float(details.declared_value),
                                "shipment_dimensions": {
                                    "length": {"value": float(details.length_cm or 0)},
                                    "breadth": {"value": float(details.width_cm or 0)},
                                    "height": {"value": float(details.height_cm or 0)},
                                    "weight": {"value": float(details.weight_kg)},
                                },
                            },
                        }
                    ],
                }
            ],
        }

        response_data = await self.request_json(
            "POST", self.create_order_url, headers=await self._headers(), json=body
        )
        self._raise_for_error(response_data, "create_order")

        responses = response_data.get("response") or []
        if not responses or not responses[0].get("tracking_id"):
            raise ProviderUnavailable(self.slug, "Ekart did not return a tracking id")

        awb_number = responses[0]["tracking_id"]
        return BookingResultModel(
            courier=self.slug,
            awb=awb_number,
            tracking_url=self.tracking_page_url + awb_number,
            booking_type=BookingType.API,
            raw=responses[0],
        )

    async def track_shipment(self, awb: str) -> TrackingResultModel:
        response_data = await self.request_json(
            "POST",
            self.track_order_url,
            headers=await self._headers(),
            json={"tracking_ids": [awb]},
        )
        self._raise_for_error(response_data, "track_shipment")

        tracking_data = response_data.get(awb)
        if not tracking_data or not tracking_data.get("history"):
            raise ProviderUnavailable(self.slug, f"No tracking data for {awb}")

        history = [
            TrackingEventModel(
                status=status_mapping.get(
                    activity.get("status", "").strip(), activity.get("status", "").strip()
                ),
                description=activity.get("public_description"),
                location=activity.get("city"),
                timestamp=parse(activity["event_date"]) if activity.get("event_date") else None,
            )
            for activity in tracking_data["history"]
        ]

        return TrackingResultModel(
            courier=self.slug,
            awb=tracking_data.get("external_tracking_id") or awb,
            status=history[0].status,
            history=history,
        )

    async def cancel_shipment(self, awb: str) -> CancellationResultModel:
        response_data = await self.request_json(
            "PUT",
            self.cancel_order_url,
            headers=await self._headers(),
            json={"request_details": {"tracking_id": awb, "reason": "Order Cancelled"}},
        )

        confirmed = not any(response_data.get(key) for key in ERROR_KEYS)
        if not confirmed:
            logger.error(msg=f"Ekart cancel_shipment failed: {response_data}")

        return CancellationResultModel(courier=self.slug, awb=awb, confirmed=confirmed)

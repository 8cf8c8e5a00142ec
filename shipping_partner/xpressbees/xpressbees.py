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


SUCCESS_CODE = 100


class Xpressbees(RateCardProviderAdapter):

    slug = "xpressbees"
    name = "Xpressbees"
    mode = ServiceMode.SURFACE

    # API URL'S
    Generate_Url = "https://userauthapis.xbees.in/api/auth/generateToken"
    serviceability_url = "https://global-api.xbees.in/global/v1/pincodeServiceability"
    create_order_url = "https://global-api.xbees.in/global/v1/serviceRequest"
    cancellation_order_url = "https://clientshipupdatesapi.xbees.in/forwardcancellation"
    track_order_url = "https://apishipmenttracking.xbees.in/GetShipmentAuditLog"
    tracking_page_url = "https://www.xpressbees.com/shipment/tracking?awbNo="

    # tokens are valid for a few hours, refresh well before that
    TOKEN_TTL = 60 * 60

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._token_cache = TTLCache(maxsize=1, ttl=self.TOKEN_TTL)

    async def generate_token(self) -> str:
        token = self._token_cache.get("token")
        if token:
            return token

        response_data = await self.request_json(
            "POST",
            self.Generate_Url,
            headers={"Content-Type": "application/json"},
            json={
                "username": self.credentials.get("username"),
                "password": self.credentials.get("password"),
                "secretkey": self.credentials.get("secretkey"),
            },
        )

        token = response_data.get("token")
        if not token:
            logger.error(msg=f"XPRESSBEES generate_token token error: {response_data}")
            raise ProviderUnavailable(self.slug, "Unable to authenticate with Xpressbees")

        self._token_cache["token"] = token
        return token

    async def _headers(self) -> Dict[str, str]:
        return {
            "token": await self.generate_token(),
            "Content-Type": "application/json",
            "versionnumber": "v1",
        }

    async def check_serviceability(self, pincode: str) -> ServiceabilityModel:
        response_data = await self.request_json(
            "POST",
            self.serviceability_url,
            headers=await self._headers(),
            json={"Pincode": pincode},
        )

        if response_data.get("ReturnCode") != SUCCESS_CODE:
            return ServiceabilityModel(pincode=pincode, serviceable=False)

        data = response_data.get("Data") or {}
        return ServiceabilityModel(
            pincode=pincode,
            serviceable=bool(data.get("Prepaid")) or bool(data.get("COD")),
            cod_available=bool(data.get("COD")),
            pickup_available=bool(data.get("Pickup")),
            details=data,
        )

    async def create_shipment(self, details: BookingRequestModel) -> BookingResultModel:
        body = {
            "AirWayBillNO": "",
            "BusinessAccountName": details.seller_name,
            "OrderNo": details.order_number,
            "OrderType": "COD" if details.is_cod else "PrePaid",
            "CollectibleAmount": float(details.cod_amount) if details.is_cod else 0,
            "DeclaredValue": float(details.declared_value),
            "PickupType": "Vendor",
            "Quantity": 1,
            "ServiceType": "SD",
            "DropDetails": {
                "Addresses": [
                    {
                        "Address": details.consignee_address,
                        "City": details.consignee_city,
                        "State": details.consignee_state,
                        "PinCode": details.delivery_pincode,
                        "Type": "Primary",
                        "Name": details.consignee_name,
                    }
                ],
                "ContactDetails": [
                    {"PhoneNo": details.consignee_phone, "Type": "Primary"}
                ],
            },
            "PickupDetails": {
                "Addresses": [{"PinCode": details.pickup_pincode, "Type": "Primary"}],
            },
            "PackageDetails": {
                "Dimensions": {
                    "Height": float(details.height_cm or 0),
                    "Length": float(details.length_cm or 0),
                    "Width": float(details.width_cm or 0),
                },
                "Weight": {"BillableWeight": float(details.weight_kg)},
            },
        }

        response_data = await self.request_json(
            "POST", self.create_order_url, headers=await self._headers(), json=body
        )

        # If order creation failed at Xpressbees, return message
        if response_data.get("code") != SUCCESS_CODE:
            logger.error(msg=f"XPRESSBEES create_order failed: {response_data}")
            raise ProviderUnavailable(
                self.slug, response_data.get("message") or "Xpressbees rejected the shipment"
            )

        shipment = response_data["data"][0]
        awb_number = shipment["AWBNo"]

        return BookingResultModel(
            courier=self.slug,
            awb=awb_number,
            tracking_url=self.tracking_page_url + awb_number,
            booking_type=BookingType.API,
            raw=shipment,
        )

    async def track_shipment(self, awb: str) -> TrackingResultModel:
        response_data = await self.request_json(
            "POST",
            self.track_order_url,
            headers=await self._headers(),
            json={"AWBNumber": awb},
        )

        if response_data.get("ReturnCode") != SUCCESS_CODE:
            logger.error(msg=f"XPRESSBEES track_shipment failed: {response_data}")
            raise ProviderUnavailable(self.slug, f"No tracking data for {awb}")

        activities = response_data.get("ShipmentLogDetails") or []
        if not activities:
            raise ProviderUnavailable(self.slug, f"No tracking data for {awb}")

        history = [
            TrackingEventModel(
                status=status_mapping.get(activity.get("ShipmentStatus", ""), "in transit"),
                description=activity.get("Remarks"),
                location=activity.get("City"),
                timestamp=parse(activity["StatusDate"]) if activity.get("StatusDate") else None,
            )
            for activity in activities
        ]

        return TrackingResultModel(
            courier=self.slug,
            awb=awb,
            status=history[0].status,
            history=history,
        )

    async def cancel_shipment(self, awb: str) -> CancellationResultModel:
        response_data = await self.request_json(
            "POST",
            self.cancellation_order_url,
            headers=await self._headers(),
            json={"ShippingID": awb, "CancellationReason": "Cancel Order"},
        )

        confirmed = response_data.get("ReturnCode") == SUCCESS_CODE
        if not confirmed:
            logger.error(msg=f"XPRESSBEES cancel_shipment failed: {response_data}")

        return CancellationResultModel(
            courier=self.slug,
            awb=awb,
            confirmed=confirmed,
            message=response_data.get("ReturnMessage"),
        )

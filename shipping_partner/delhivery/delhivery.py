import json
import re
import unicodedata
from typing import Dict

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
from .status_mapping import map_status


def clean_text(text):
    if text is None:
        return ""
    # Normalize Unicode and replace non-breaking spaces with normal spaces
    text = unicodedata.normalize("NFKC", text).replace("\xa0", " ").strip()
    # Replace all special characters except comma and hyphen with a space
    text = re.sub(r"[^a-zA-Z0-9\s,-]", " ", text)
    # Replace multiple spaces with a single space
    return re.sub(r"\s+", " ", text).strip()


class Delhivery(RateCardProviderAdapter):

    slug = "delhivery"
    name = "Delhivery"
    mode = ServiceMode.SURFACE

    # API URL'S
    serviceability_url = "https://track.delhivery.com/c/api/pin-codes/json/"

    create_order_url = "https://track.delhivery.com/api/cmu/create.json"

    track_order_url = "https://track.delhivery.com/api/v1/packages/json/"

    cancel_order_url = "https://track.delhivery.com/api/p/edit"

    tracking_page_url = "https://www.delhivery.com/track/package/"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": "Token " + (self.credentials.get("token") or ""),
        }

    async def check_serviceability(self, pincode: str) -> ServiceabilityModel:
        response_data = await self.request_json(
            "GET",
            self.serviceability_url,
            params={"filter_codes": pincode},
            headers=self._headers(),
        )

        delivery_codes = response_data.get("delivery_codes") or []
        if not delivery_codes:
            return ServiceabilityModel(pincode=pincode, serviceable=False)

        postal_code = delivery_codes[0].get("postal_code", {})
        prepaid = postal_code.get("pre_paid") == "Y"
        cod = postal_code.get("cod") == "Y"

        return ServiceabilityModel(
            pincode=pincode,
            serviceable=prepaid or cod,
            cod_available=cod,
            pickup_available=postal_code.get("pickup") == "Y",
            details=postal_code,
        )

    async def create_shipment(self, details: BookingRequestModel) -> BookingResultModel:
        make_data_string = {
            "shipments": [
                {
                    "name": details.consignee_name,
                    "add": clean_text(details.consignee_address),
                    "pin": details.delivery_pincode,
                    "city": details.consignee_city,
                    "state": details.consignee_state,
                    "country": "India",
                    "phone": details.consignee_phone,
                    "order": details.order_number,
                    "payment_mode": "COD" if details.is_cod else "Pre-paid",
                    "cod_amount": float(details.cod_amount) if details.is_cod else 0,
                    "total_amount": float(details.declared_value),
                    "shipment_length": float(details.length_cm or 0),
                    "shipment_width": float(details.width_cm or 0),
                    "shipment_height": float(details.height_cm or 0),
                    "weight": float(details.weight_kg * 1000),
                    "shipping_mode": "express" if self.mode == ServiceMode.AIR else "surface",
                }
            ],
            "pickup_location": {
                "name": clean_text(details.seller_name),
                "pin_code": details.pickup_pincode,
                "country": "India",
            },
        }

        # Delhivery expects a form style body wrapping the JSON document
        body = f"format=json&data={json.dumps(make_data_string)}"

        response_data = await self.request_json(
            "POST", self.create_order_url, headers=self._headers(), content=body
        )

        packages = response_data.get("packages") or []
        if not packages or packages[0].get("status") != "Success":
            remarks = packages[0].get("remarks") if packages else None
            logger.error(msg=f"Delhivery order creation failed: {response_data}")
            raise ProviderUnavailable(
                self.slug,
                remarks[0] if remarks else "Delhivery did not create the shipment",
            )

        awb_number = packages[0]["waybill"]
        logger.info(msg=f"Delhivery AWB {awb_number} assigned for {details.order_number}")

        return BookingResultModel(
            courier=self.slug,
            awb=awb_number,
            tracking_url=self.tracking_page_url + awb_number,
            booking_type=BookingType.API,
            raw=packages[0],
        )

    async def track_shipment(self, awb: str) -> TrackingResultModel:
        response_data = await self.request_json(
            "GET",
            self.track_order_url,
            params={"waybill": awb, "ref_ids": ""},
            headers=self._headers(),
        )

        if "Error" in response_data:
            raise ProviderUnavailable(self.slug, str(response_data["Error"]))

        tracking_data = response_data.get("ShipmentData") or []
        if not tracking_data:
            raise ProviderUnavailable(self.slug, f"No tracking data for {awb}")

        shipment = tracking_data[0]["Shipment"]
        current = shipment.get("Status", {})

        history = []
        for activity in shipment.get("Scans") or []:
            scan = activity.get("ScanDetail", {})
            timestamp = scan.get("StatusDateTime")
            history.append(
                TrackingEventModel(
                    status=map_status(scan.get("ScanType", ""), scan.get("Scan", "")),
                    description=scan.get("Instructions"),
                    location=scan.get("ScannedLocation"),
                    timestamp=parse(timestamp) if timestamp else None,
                )
            )
        history.reverse()

        return TrackingResultModel(
            courier=self.slug,
            awb=shipment.get("AWB") or awb,
            status=map_status(current.get("StatusType", ""), current.get("Status", "")),
            history=history,
        )

    async def cancel_shipment(self, awb: str) -> CancellationResultModel:
        response_data = await self.request_json(
            "POST",
            self.cancel_order_url,
            headers=self._headers(),
            json={"waybill": awb, "cancellation": True},
        )

        confirmed = response_data.get("status") not in ("Failure", False)
        if not confirmed:
            logger.error(msg=f"Delhivery cancel_shipment failed: {response_data}")

        return CancellationResultModel(
            courier=self.slug,
            awb=awb,
            confirmed=confirmed,
            message=response_data.get("remark"),
        )


class DelhiveryAir(Delhivery):

    slug = "delhivery-air"
    name = "Delhivery Air"
    mode = ServiceMode.AIR

from .shipment_controller import shipment_router
from .shipment_service import ShipmentService

__all__ = ["ShipmentService", "shipment_router"]

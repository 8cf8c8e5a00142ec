from pydantic import BaseModel

# schema
from modules.orders.order_schema import OrderModel
from shipping_partner.provider_schema import BookingResultModel


class AssignAwbResponseModel(BaseModel):
    order: OrderModel
    booking: BookingResultModel

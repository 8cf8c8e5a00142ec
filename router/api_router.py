from fastapi import APIRouter, Depends

from context_manager.context import build_request_context

# routers
from modules.orders import order_router
from modules.rate_card import rate_card_router
from modules.serviceability import serviceability_router
from modules.shipment import shipment_router
from modules.wallet import wallet_router


# create a comming master router for all the routes in the service
CommonRouter = APIRouter(dependencies=[Depends(build_request_context)])


# add all the routes to the master router
CommonRouter.include_router(serviceability_router)
CommonRouter.include_router(rate_card_router)
CommonRouter.include_router(wallet_router)
CommonRouter.include_router(order_router)
CommonRouter.include_router(shipment_router)

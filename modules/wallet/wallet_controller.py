import http
from fastapi import APIRouter, Depends, Request

from context_manager.context import get_seller_id, get_services
from limiter import limiter

# schema
from schema.base import GenericResponseModel
from .wallet_schema import RechargeRequestModel, TransactionFilterModel, WalletResponseModel

# utils
from utils.response_handler import build_api_response


# creating a client router
wallet_router = APIRouter(tags=["wallet"], prefix="/wallet")


@wallet_router.get(
    "/balance",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def get_balance(
    seller_id: int = Depends(get_seller_id),
    services=Depends(get_services),
):
    balance = services.wallet.get_balance(seller_id)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=WalletResponseModel(seller_id=seller_id, balance=balance),
            message="successfull",
        )
    )


@wallet_router.post(
    "/transactions",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def get_wallet_transactions(
    filters: TransactionFilterModel,
    seller_id: int = Depends(get_seller_id),
    services=Depends(get_services),
):
    transactions, total_count = services.wallet.list_transactions(seller_id, filters)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data={"transactions": transactions, "total_count": total_count},
            message="successfull",
        )
    )


@wallet_router.post(
    "/recharge",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
@limiter.limit("5/1second")
def recharge_wallet(
    request: Request,
    recharge_params: RechargeRequestModel,
    seller_id: int = Depends(get_seller_id),
    services=Depends(get_services),
):
    transaction = services.wallet.recharge(
        seller_id, recharge_params.amount, recharge_params.reference
    )
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data=transaction,
            message="Wallet recharged successfully",
        )
    )


@wallet_router.get(
    "/verify",
    status_code=http.HTTPStatus.OK,
    response_model=GenericResponseModel,
)
def verify_ledger(
    seller_id: int = Depends(get_seller_id),
    services=Depends(get_services),
):
    verification = services.wallet.verify_ledger(seller_id)
    return build_api_response(
        GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=verification.consistent,
            data=verification,
            message="Ledger consistent" if verification.consistent else "Ledger mismatch found",
        )
    )

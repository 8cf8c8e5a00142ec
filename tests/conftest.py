# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from config import get_settings
from context_manager.container import build_services
from database import build_engine, build_session_factory, init_models
from main import create_app

from tests.factories import StubCourier, add_cards_for_all_zones, make_seller, seed_pincodes


@pytest.fixture
def settings():
    return get_settings(
        database_url="sqlite:///:memory:",
        active_couriers=[],
        provider_timeout_seconds=5,
    )


# =========================================
# throwaway sqlite file per test, couriers quote from worker threads so every
# thread gets its own pooled connection
# =========================================
@pytest.fixture
def engine(tmp_path):
    engine = build_engine(
        f"sqlite:///{tmp_path / 'shipping.db'}",
        connect_args={"check_same_thread": False},
    )
    init_models(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = build_session_factory(engine)
    seed_pincodes(factory)
    return factory


@pytest.fixture
def seller_id(session_factory):
    return make_seller(session_factory, balance="1000")


@pytest.fixture
def services(settings, engine, session_factory):
    return build_services(settings, engine, session_factory, http_client=None, adapters=[])


@pytest.fixture
def couriers(services):
    """
    Two surface couriers priced from rate cards:
    alpha 40 + 20 per 0.5 kg, beta 50 + 25 per 0.5 kg.
    """
    add_cards_for_all_zones(services.rate_cards, "alpha", 40, 20)
    add_cards_for_all_zones(services.rate_cards, "beta", 50, 25)

    alpha = StubCourier("alpha", services.rate_quote)
    beta = StubCourier("beta", services.rate_quote)
    services.registry.register(alpha)
    services.registry.register(beta)
    return {"alpha": alpha, "beta": beta}


@pytest.fixture
def client(services):
    app = create_app(services=services)
    with TestClient(app) as test_client:
        yield test_client

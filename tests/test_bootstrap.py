"""Settings and application wiring tests."""

import pytest
from pydantic import ValidationError as SettingsError

from pos_checkout.adapters.outbound.http_change_service import HttpChangeService
from pos_checkout.adapters.outbound.http_sales import HttpSaleSubmitter
from pos_checkout.adapters.outbound.in_memory_sales import InMemorySaleStore
from pos_checkout.bootstrap import build_application
from pos_checkout.config import Settings
from pos_checkout.core.domain.model.checkout_state import (
    CheckoutState,
    can_transition,
)


class TestSettings:
    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("POS_BACKEND_URL", "http://till-backend:5000")
        monkeypatch.setenv("POS_REQUEST_TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.backend_url == "http://till-backend:5000"
        assert settings.request_timeout_seconds == 2.5
        assert settings.currency == "LKR"

    def test_timeout_must_be_positive(self):
        with pytest.raises(SettingsError):
            Settings(_env_file=None, request_timeout_seconds=0)


class TestBuildApplication:
    def test_offline_uses_memory_store(self):
        app = build_application(Settings(_env_file=None, backend_url=None))

        assert isinstance(app.sales, InMemorySaleStore)
        assert app.checkout.deps.sales is app.sales
        assert app.checkout.deps.payment.change_service is None

    def test_online_uses_http_clients(self):
        settings = Settings(_env_file=None, backend_url="http://b", request_timeout_seconds=3)

        app = build_application(settings)

        change = app.checkout.deps.payment.change_service
        assert isinstance(change, HttpChangeService)
        assert change.timeout == 3
        assert isinstance(app.checkout.deps.sales, HttpSaleSubmitter)
        assert app.sales is None


class TestTransitions:
    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (CheckoutState.IDLE, CheckoutState.PAYMENT_SELECTION, True),
            (CheckoutState.IDLE, CheckoutState.COMPLETED, False),
            (CheckoutState.CASH_ENTRY, CheckoutState.COMPLETED, False),
            (CheckoutState.CHANGE_COMPUTED, CheckoutState.COMPLETED, True),
            (CheckoutState.CARD_READY, CheckoutState.COMPLETED, True),
            (CheckoutState.COMPLETED, CheckoutState.IDLE, True),
            (CheckoutState.COMPLETED, CheckoutState.CASH_ENTRY, False),
        ],
    )
    def test_can_transition(self, current, target, allowed):
        assert can_transition(current, target) is allowed

"""CLI adapter tests."""

import asyncio
import json

from pos_checkout.adapters.inbound.cli import run_cli
from pos_checkout.adapters.outbound.in_memory_sales import InMemorySaleStore
from pos_checkout.core.domain.model.checkout_state import CheckoutState

from conftest import build_session

ORDER = {
    "customer": {"name": "Nimal", "phone": "0771234567"},
    "items": [
        {"id": "4", "name": "Sunlight Soap 100g", "unit_price": "95.00", "quantity": 2}
    ],
    "payment": {"method": "cash", "amount_received": "500"},
}


def run(session, payload):
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    return asyncio.run(run_cli(session, raw))


class TestRunCli:
    def test_cash_sale(self, capsys):
        h = build_session()

        code = run(h.session, ORDER)

        assert code == 0
        out = capsys.readouterr().out
        assert out.startswith("[ok]")
        assert "'change': '310.00'" in out
        assert h.session.state is CheckoutState.COMPLETED
        assert h.session.last_sale.customer.name == "Nimal"

    def test_card_sale_without_customer(self, capsys):
        h = build_session()
        order = {"items": ORDER["items"], "payment": {"method": "card"}}

        assert run(h.session, order) == 0
        assert "'change': None" in capsys.readouterr().out
        assert h.session.last_sale.customer is None

    def test_invalid_json(self, capsys):
        assert run(build_session().session, "{not json") == 2
        assert "invalid_input" in capsys.readouterr().out

    def test_unknown_payment_method(self):
        order = {**ORDER, "payment": {"method": "cheque"}}
        assert run(build_session().session, order) == 2

    def test_insufficient_cash(self, capsys):
        order = {**ORDER, "payment": {"method": "cash", "amount_received": "10"}}

        assert run(build_session().session, order) == 1
        assert capsys.readouterr().out.startswith("[ng]")

    def test_submission_failure(self):
        h = build_session(store=InMemorySaleStore(fail=True))
        assert run(h.session, ORDER) == 1
        assert h.session.cart.item_count() == 1

    def test_fractional_quantity_rejected(self):
        h = build_session()
        item = {**ORDER["items"][0], "quantity": 2.5}
        order = {"items": [item], "payment": {"method": "card"}}

        assert run(h.session, order) == 2
        assert h.session.cart.is_empty()
        assert h.session.last_sale is None

    def test_non_object_payload(self, capsys):
        assert run(build_session().session, "[]") == 2
        assert "payload must be a JSON object" in capsys.readouterr().out

    def test_non_object_item(self):
        order = {"items": ["soap"], "payment": {"method": "card"}}
        assert run(build_session().session, order) == 2

    def test_oversized_amount(self):
        order = {**ORDER, "payment": {"method": "cash", "amount_received": "1e30"}}
        assert run(build_session().session, order) == 2

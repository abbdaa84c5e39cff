import json

import pytest

from order_desk.adapters.inbound.cli import main, run_cli
from order_desk.bootstrap import build_usecases
from order_desk.config import Settings
from tests.fakes import RecordingNotifier


def _usecase():
    return build_usecases(Settings(), notifier=RecordingNotifier()).create_order


def _payload(quantity=2, **extra):
    body = {
        "customer": {"name": "Jane"},
        "fulfillment": {"type": "pickup", "person_name": "Jim"},
        "lines": [
            {
                "inventory_id": "inv-2",
                "product_id": "prod-2",
                "name": "Pale Ale 6-pack",
                "unit_price": "9.99",
                "quantity": quantity,
                "max_quantity": 10,
            }
        ],
    }
    body.update(extra)
    return json.dumps(body)


def test_places_order(capsys):
    code = run_cli(_usecase(), _payload(coupon_code="WELCOME10"), "store-1", "USD")

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("[ok]")
    assert "'total': '17.98'" in out


def test_reports_shortages(capsys):
    code = run_cli(_usecase(), _payload(quantity=7), "store-1", "USD")

    out = capsys.readouterr().out
    assert code == 1
    assert out.startswith("[ng] insufficient_stock")
    assert "  - 2 units of Pale Ale 6-pack no longer available" in out


def test_rejects_bad_json(capsys):
    assert run_cli(_usecase(), "{not json", "store-1", "USD") == 2
    assert "invalid_input" in capsys.readouterr().out


def test_main_without_arguments(capsys):
    assert main([]) == 2
    assert "usage" in capsys.readouterr().out


@pytest.mark.parametrize(
    "raw",
    [
        _payload(fulfillment=None),
        _payload(customer="Jane"),
        _payload(lines={"inventory_id": "inv-2"}),
        json.dumps([{"customer": {"name": "Jane"}}]),
    ],
)
def test_malformed_sections_are_invalid_input(raw, capsys):
    assert run_cli(_usecase(), raw, "store-1", "USD") == 2
    assert "invalid_input" in capsys.readouterr().out


def test_duplicate_and_oversized_lines_are_invalid_input(capsys):
    body = json.loads(_payload())
    body["lines"].append(dict(body["lines"][0], quantity=3))
    assert run_cli(_usecase(), json.dumps(body), "store-1", "USD") == 2
    assert "listed twice" in capsys.readouterr().out

    assert run_cli(_usecase(), _payload(quantity=11), "store-1", "USD") == 2
    assert "exceeds max_quantity" in capsys.readouterr().out

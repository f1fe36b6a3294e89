import logging

import pytest

from config.config import PaymentSettings, Settings
from payments.facilitator import FacilitatorError
from payments.gate import InvalidPaymentHeader, decode_payment_header

from .fakes import PAY_TO, FakeFacilitator, FakeUpstreamClient, build_client, encode_payment

PAYMENT = {"x402Version": 1, "scheme": "exact", "network": "base", "payload": {"signature": "0x"}}


def paid(path, client, **params):
    return client.get(path, params=params, headers={"X-PAYMENT": encode_payment(PAYMENT)})


@pytest.mark.parametrize(
    "path, params",
    [
        ("/api/search", {"q": "python"}),
        ("/api/fetch", {"url": "http://example.com"}),
        ("/api/analyze-github", {"repo": "facebook/react"}),
    ],
)
def test_missing_payment_is_402_without_upstream_call(paid_client, upstream, facilitator, path, params):
    r = paid_client.get(path, params=params)
    assert r.status_code == 402
    body = r.json()
    assert body["x402Version"] == 1
    assert body["error"] == "X-PAYMENT header is required"
    assert upstream.calls == []
    assert facilitator.verify_calls == []
    assert facilitator.settle_calls == []


def test_requirements_advertise_price_network_and_payee(paid_client):
    r = paid_client.get("/api/search", params={"q": "python"})
    (requirements,) = r.json()["accepts"]
    assert requirements["scheme"] == "exact"
    assert requirements["network"] == "base"
    assert requirements["maxAmountRequired"] == "1000"
    assert requirements["payTo"] == PAY_TO
    assert requirements["asset"] == "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
    assert requirements["extra"] == {"name": "USD Coin", "version": "2"}
    assert requirements["description"] == "Web search"
    assert requirements["resource"] == "http://testserver/api/search"


def test_chain_qualified_network_identifier(upstream, facilitator):
    settings = Settings(
        payment=PaymentSettings(enabled=True, pay_to=PAY_TO, network="eip155:84532")
    )
    client = build_client(settings, upstream, facilitator)
    (requirements,) = client.get("/api/fetch", params={"url": "http://x"}).json()["accepts"]
    assert requirements["network"] == "eip155:84532"
    assert requirements["asset"] == "0x036CbD53842c5426634e7929541eC2318f3dCF7e"
    assert requirements["maxAmountRequired"] == "2000"


def test_malformed_payment_header_is_402(paid_client, upstream, facilitator):
    r = paid_client.get("/api/search", params={"q": "x"}, headers={"X-PAYMENT": "not base64!"})
    assert r.status_code == 402
    assert r.json()["error"] == "Invalid or malformed payment header"
    assert upstream.calls == []
    assert facilitator.verify_calls == []


def test_valid_payment_runs_handler_once_and_settles_once(paid_client, upstream, facilitator):
    r = paid("/api/search", paid_client, q="python")
    assert r.status_code == 200
    assert r.json()["count"] == 2
    assert len(upstream.calls) == 1
    assert len(facilitator.verify_calls) == 1
    assert len(facilitator.settle_calls) == 1

    payload, requirements = facilitator.settle_calls[0]
    assert payload == PAYMENT
    assert requirements == facilitator.verify_calls[0][1]


def test_invalid_payment_is_402_without_upstream_call(paid_settings, upstream):
    facilitator = FakeFacilitator(valid=False)
    client = build_client(paid_settings, upstream, facilitator)
    r = paid("/api/search", client, q="python")
    assert r.status_code == 402
    assert r.json()["error"] == "insufficient_funds"
    assert upstream.calls == []
    assert facilitator.settle_calls == []


def test_facilitator_outage_during_verify_is_402_without_upstream_call(paid_settings, upstream):
    facilitator = FakeFacilitator(
        verify_error=FacilitatorError("Facilitator /verify returned 503: unavailable")
    )
    client = build_client(paid_settings, upstream, facilitator)
    r = paid("/api/analyze-github", client, repo="facebook/react")
    assert r.status_code == 402
    body = r.json()
    assert body["error"] == "Facilitator /verify returned 503: unavailable"
    assert len(body["accepts"]) == 1
    assert len(facilitator.verify_calls) == 1
    assert upstream.calls == []
    assert facilitator.settle_calls == []


def test_failed_handler_is_not_settled(paid_settings, facilitator):
    upstream = FakeUpstreamClient(commits={"message": "Not Found"})
    client = build_client(paid_settings, upstream, facilitator)
    r = paid("/api/analyze-github", client, repo="nobody/nothing")
    assert r.status_code == 500
    assert len(facilitator.verify_calls) == 1
    assert facilitator.settle_calls == []


def test_missing_param_on_paid_route_is_not_settled(paid_client, upstream, facilitator):
    r = paid("/api/fetch", paid_client)
    assert r.status_code == 400
    assert upstream.calls == []
    assert facilitator.settle_calls == []


@pytest.mark.parametrize(
    "facilitator",
    [
        FakeFacilitator(settle_success=False),
        FakeFacilitator(settle_error=FacilitatorError("Facilitator /settle returned 503")),
    ],
)
def test_settlement_failure_keeps_response_and_is_logged(paid_settings, upstream, facilitator, caplog):
    client = build_client(paid_settings, upstream, facilitator)
    with caplog.at_level(logging.ERROR, logger="payments.gate"):
        r = paid("/api/fetch", client, url="http://example.com")
    assert r.status_code == 200
    assert r.json()["extracted"] == "Hello &amp; World"
    assert len(facilitator.settle_calls) == 1
    assert any("settlement" in rec.getMessage() for rec in caplog.records)


def test_service_info_is_never_gated(paid_client, facilitator):
    r = paid_client.get("/")
    assert r.status_code == 200
    body = r.json()
    assert body["mode"] == "paid"
    assert body["network"] == "base"
    assert body["endpoints"]["/api/analyze-github"] == {
        "price": "$0.005",
        "description": "GitHub repository analysis",
    }
    assert facilitator.verify_calls == []


def test_decode_payment_header_round_trip():
    assert decode_payment_header(encode_payment(PAYMENT)) == PAYMENT


@pytest.mark.parametrize("header", ["%%%", encode_payment([1, 2]), "bm90IGpzb24="])
def test_decode_payment_header_rejects_garbage(header):
    with pytest.raises(InvalidPaymentHeader):
        decode_payment_header(header)


def test_unpriced_path_is_not_gated(paid_client, facilitator):
    r = paid_client.get("/api/unknown")
    assert r.status_code == 404
    assert facilitator.verify_calls == []

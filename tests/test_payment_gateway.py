import pytest
import requests

from resumeboost.services.errors import UpstreamError
from resumeboost.services.payment_gateway import RazorpayGateway


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def make_gateway(session, key_id="rzp_test_key", key_secret="secret"):
    return RazorpayGateway(
        key_id=key_id,
        key_secret=key_secret,
        api_url="https://api.razorpay.test/v1/orders",
        timeout=5,
        session=session,
    )


def test_create_order_posts_minor_units_with_basic_auth():
    session = FakeSession(FakeResponse(200, {"id": "order_123", "amount": 64000}))
    gateway = make_gateway(session)

    order = gateway.create_order(64000, "INR", receipt="txn_abc", notes={"planId": "starter_plan", "couponCode": None})

    assert order["id"] == "order_123"
    url, kwargs = session.requests[0]
    assert url == "https://api.razorpay.test/v1/orders"
    assert kwargs["auth"] == ("rzp_test_key", "secret")
    assert kwargs["timeout"] == 5
    assert kwargs["json"] == {
        "amount": 64000,
        "currency": "INR",
        "receipt": "txn_abc",
        "notes": {"planId": "starter_plan", "couponCode": ""},
    }


def test_missing_credentials_fail_without_calling_gateway():
    session = FakeSession(FakeResponse(200, {"id": "order_123"}))
    gateway = make_gateway(session, key_secret=None)

    assert not gateway.is_configured
    with pytest.raises(UpstreamError):
        gateway.create_order(100, "INR", receipt="txn_1")
    assert session.requests == []


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.Timeout("timed out")),
        FakeSession(FakeResponse(400, {"error": {"description": "bad amount"}}, text="bad amount")),
        FakeSession(FakeResponse(200, None, text="<html>")),
        FakeSession(FakeResponse(200, {"status": "created"})),
        FakeSession(FakeResponse(200, [{"id": "order_123"}])),
    ],
)
def test_gateway_failures_are_upstream_errors(session):
    gateway = make_gateway(session)

    with pytest.raises(UpstreamError):
        gateway.create_order(100, "INR", receipt="txn_1")

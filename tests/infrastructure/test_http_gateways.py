"""Tests for the HTTP gateways, using httpx.MockTransport."""

import json

import httpx
import pytest

from storefront.application.resolve_payment_method import PaymentMethodResolver
from storefront.domain.exceptions import NetworkError, NotFound
from storefront.domain.model.address import ShippingAddress
from storefront.domain.model.order import OrderRequest, OrderRequestItem
from storefront.domain.model.payment import CardInput, PaymentMethod
from storefront.domain.model.stock import StockTransaction
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.local_store import PAYMENT_METHOD_KEY
from storefront.infrastructure.http.api_client import ApiClient
from storefront.infrastructure.http.http_order_gateway import HttpOrderGateway
from storefront.infrastructure.http.http_payment_gateway import HttpPaymentMethodGateway
from storefront.infrastructure.http.http_product_catalog import HttpProductCatalog
from storefront.infrastructure.http.http_shipping_gateway import HttpShippingGateway
from storefront.infrastructure.http.http_stock_gateway import HttpStockGateway
from tests.fakes import FakeSession, InMemoryLocalStore

pytestmark = pytest.mark.asyncio


class Recorder:
    """MockTransport handler that answers from a route table and records requests."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes.get(
            (request.method, request.url.path), httpx.Response(404, json={"message": "no route"})
        )

    def client(self) -> ApiClient:
        return ApiClient("http://shop.test", FakeSession(), transport=httpx.MockTransport(self))


ADDRESS = ShippingAddress(full_name="Ann Lee", line1="1 Main St", district="Central")


# ── Orders ───────────────────────────────────────────────────────────────────


class TestHttpOrderGateway:

    async def test_create_sends_idempotency_key(self):
        recorder = Recorder(
            {("POST", "/api/orders"): httpx.Response(201, json={"success": True, "data": {"order": {"_id": "o1"}}})}
        )
        request = OrderRequest(
            items=(OrderRequestItem("p1", 2),),
            shipping=ADDRESS,
            payment_method="pm1",
            client_token="t1",
        )

        body = await HttpOrderGateway(recorder.client()).create(request)

        assert body["data"]["order"]["_id"] == "o1"
        sent = recorder.requests[0]
        assert sent.headers["Idempotency-Key"] == "t1"
        assert json.loads(sent.content) == {
            "items": [{"productId": "p1", "quantity": 2}],
            "shipping": ADDRESS.to_raw(),
            "paymentMethod": "pm1",
            "clientToken": "t1",
        }

    async def test_create_rejected_by_backend(self):
        recorder = Recorder(
            {("POST", "/api/orders"): httpx.Response(200, json={"success": False, "message": "Out of stock"})}
        )
        request = OrderRequest(items=(), shipping=None, payment_method="pm1")
        with pytest.raises(NetworkError, match="Out of stock"):
            await HttpOrderGateway(recorder.client()).create(request)

    async def test_fetch_falls_back_to_legacy_path(self):
        recorder = Recorder({("GET", "/orders/o1"): httpx.Response(200, json={"_id": "o1"})})

        body = await HttpOrderGateway(recorder.client()).fetch("o1")

        assert body == {"_id": "o1"}
        assert [r.url.path for r in recorder.requests] == ["/api/orders/o1", "/orders/o1"]

    async def test_fetch_missing_everywhere(self):
        with pytest.raises(NotFound):
            await HttpOrderGateway(Recorder({}).client()).fetch("o9")


# ── Stock ────────────────────────────────────────────────────────────────────


class TestHttpStockGateway:

    async def test_record_posts_transaction(self):
        recorder = Recorder({("POST", "/api/transactions"): httpx.Response(201, json={"success": True})})
        tx = StockTransaction.for_order_line("o1", "p1", Quantity(2))

        await HttpStockGateway(recorder.client()).record(tx)

        sent = recorder.requests[0]
        assert json.loads(sent.content) == {"type": "out", "productId": "p1", "quantity": 2}
        assert sent.headers["Idempotency-Key"] == "o1:p1"

    async def test_record_failure_raises(self):
        recorder = Recorder({("POST", "/api/transactions"): httpx.Response(500, json={})})
        with pytest.raises(NetworkError):
            await HttpStockGateway(recorder.client()).record(
                StockTransaction.for_order_line("o1", "p1", Quantity(1))
            )


# ── Payment methods ──────────────────────────────────────────────────────────


RECORD = {"_id": "pm1", "brand": "Visa", "last4": "4242", "expMonth": 1, "expYear": 2030}


class TestHttpPaymentMethodGateway:

    @pytest.mark.parametrize(
        "body",
        [
            [RECORD],
            {"data": {"paymentMethods": [RECORD]}},
            {"paymentMethods": [RECORD]},
            {"data": {"payment": RECORD}},
        ],
    )
    async def test_list_accepts_every_shape(self, body):
        recorder = Recorder({("GET", "/api/users/payment-methods"): httpx.Response(200, json=body)})
        methods = await HttpPaymentMethodGateway(recorder.client()).list_methods()
        assert methods == [PaymentMethod(brand="Visa", last4="4242", exp_month=1, exp_year=2030, id="pm1")]

    async def test_list_unknown_shape_is_empty(self):
        recorder = Recorder({("GET", "/api/users/payment-methods"): httpx.Response(200, json={"data": {}})})
        assert await HttpPaymentMethodGateway(recorder.client()).list_methods() == []

    async def test_create_returns_server_method(self):
        recorder = Recorder(
            {("POST", "/api/users/payment-methods"): httpx.Response(201, json={"data": {"paymentMethod": RECORD}})}
        )
        card = CardInput(number="4242424242424242", cvv="123", exp_month=1, exp_year=2030)

        method = await HttpPaymentMethodGateway(recorder.client()).create(card)

        assert method.id == "pm1"
        sent = json.loads(recorder.requests[0].content)
        assert sent["provider"] == "local"
        assert "cvv" not in sent
        assert "4242424242424242" not in recorder.requests[0].content.decode()

    async def test_update_without_body_returns_none(self):
        recorder = Recorder({("PUT", "/api/users/payment-methods/pm1"): httpx.Response(200, json={"success": True})})
        card = CardInput(number="4242424242424242", cvv="123", exp_month=1, exp_year=2030)
        assert await HttpPaymentMethodGateway(recorder.client()).update("pm1", card) is None

    async def test_delete(self):
        recorder = Recorder({("DELETE", "/api/users/payment-methods/pm1"): httpx.Response(204)})
        await HttpPaymentMethodGateway(recorder.client()).delete("pm1")
        assert recorder.requests[0].method == "DELETE"

    async def test_resolver_falls_back_when_list_endpoint_missing(self):
        recorder = Recorder({})
        client = recorder.client()
        store = InMemoryLocalStore({PAYMENT_METHOD_KEY: "pm9"})
        resolver = PaymentMethodResolver(HttpPaymentMethodGateway(client), store, client.session)

        current = await resolver.resolve()

        assert recorder.requests[0].url.path == "/api/users/payment-methods"
        assert current.id == "pm9"


# ── Products ─────────────────────────────────────────────────────────────────


class TestHttpProductCatalog:

    async def test_unwraps_product(self):
        recorder = Recorder(
            {("GET", "/api/products/p1"): httpx.Response(200, json={"data": {"product": {"_id": "p1", "name": "Brake"}}})}
        )
        product = await HttpProductCatalog(recorder.client()).get_product("p1")
        assert product["name"] == "Brake"

    async def test_public_lookup_is_anonymous(self):
        recorder = Recorder(
            {("GET", "/api/public/products/p1"): httpx.Response(200, json={"product": {"_id": "p1"}})}
        )
        await HttpProductCatalog(recorder.client()).get_public_product("p1")
        assert "Authorization" not in recorder.requests[0].headers

    async def test_missing_product(self):
        with pytest.raises(NotFound):
            await HttpProductCatalog(Recorder({}).client()).get_product("p1")


# ── Shipping ─────────────────────────────────────────────────────────────────


class TestHttpShippingGateway:

    async def test_list_reads_data_addresses(self):
        body = {"data": {"addresses": [{"_id": "a1", "firstName": "Ann", "lastName": "Lee", "street": "1 Main St", "district": "Central"}]}}
        recorder = Recorder({("GET", "/api/users/shipping"): httpx.Response(200, json=body)})

        [address] = await HttpShippingGateway(recorder.client()).list_addresses()

        assert address.id == "a1"
        assert address.full_name == "Ann Lee"

    async def test_update_puts_to_address_id(self):
        recorder = Recorder({("PUT", "/api/users/shipping/a1"): httpx.Response(200, json={})})
        address = ShippingAddress(id="a1", full_name="Ann Lee", line1="1 Main St", district="Central")

        await HttpShippingGateway(recorder.client()).update(address)

        assert json.loads(recorder.requests[0].content)["street"] == "1 Main St"

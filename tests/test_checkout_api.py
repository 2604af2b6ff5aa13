# tests/test_checkout_api.py

import pytest
from httpx import AsyncClient
from unittest.mock import MagicMock

from factories import USER_ID, discount, http_error, order_data, product_data, route_tables

ORDER_ID = "4f2b7c3a-0000-0000-0000-00000000abcd"

SHIPPING_ADDRESS = {
    "full_name": "Ana Perez",
    "address": "Av. Siempre Viva 742",
    "city": "Cordoba",
    "postal_code": "5000",
    "country": "AR",
    "phone": "+54 351 000000",
}


@pytest.fixture
def backend(mock_supabase_client: MagicMock) -> MagicMock:
    """Каталог с одним товаром со скидкой и созданный заказ."""
    def orders(params):
        return [order_data(order_id=ORDER_ID, payment_method=orders.payment_method)]
    orders.payment_method = "mercadopago"

    mock_supabase_client.select.side_effect = route_tables({
        "products": [product_data("prod-1", price=100)],
        "promotion_products": [{"product_id": "prod-1", "promotion": discount(70)}],
        "orders": orders,
    })
    mock_supabase_client.insert.side_effect = [[{"id": ORDER_ID}], []]
    mock_supabase_client.update.return_value = []
    mock_supabase_client.orders_route = orders
    return mock_supabase_client


@pytest.fixture
async def filled_cart(client: AsyncClient, backend: MagicMock, cart_session: str) -> dict:
    headers = {"X-Session-Id": cart_session}
    response = await client.post(
        "/api/v1/cart/items", json={"product_id": "prod-1", "quantity": 2, "selected_color": "red"}, headers=headers
    )
    assert response.status_code == 200
    return headers


async def test_checkout_with_mercadopago_returns_init_point_and_clears_cart(
    client: AsyncClient,
    backend: MagicMock,
    filled_cart: dict,
    auth_headers: dict
):
    backend.invoke.return_value = {"init_point": "https://pay.example.com/checkout/1"}

    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "mercadopago"},
        headers={**filled_cart, **auth_headers}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["init_point"] == "https://pay.example.com/checkout/1"
    assert data["order"]["id"] == ORDER_ID
    assert data["order"]["payment_url"] == "https://pay.example.com/checkout/1"

    order_payload = backend.insert.call_args_list[0].kwargs["json"]
    assert order_payload["user_id"] == USER_ID
    assert order_payload["total"] == 140
    assert order_payload["status"] == "pending"
    assert order_payload["payment_status"] == "pending"

    items_payload = backend.insert.call_args_list[1].kwargs["json"]
    assert items_payload == [{
        "order_id": ORDER_ID,
        "product_id": "prod-1",
        "quantity": 2,
        "price_at_time": 70,
        "selected_color": "red",
    }]

    cart = await client.get("/api/v1/cart", headers=filled_cart)
    assert cart.json()["items"] == []


async def test_checkout_cash_on_delivery_skips_payment(
    client: AsyncClient,
    backend: MagicMock,
    filled_cart: dict,
    auth_headers: dict
):
    backend.orders_route.payment_method = "cash_on_delivery"

    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "cash_on_delivery"},
        headers={**filled_cart, **auth_headers}
    )

    assert response.status_code == 200
    assert response.json()["init_point"] is None
    backend.invoke.assert_not_called()


async def test_checkout_with_empty_cart_is_rejected(
    client: AsyncClient,
    mock_supabase_client: MagicMock,
    cart_session: str,
    auth_headers: dict
):
    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "mercadopago"},
        headers={"X-Session-Id": cart_session, **auth_headers}
    )

    assert response.status_code == 400
    mock_supabase_client.insert.assert_not_called()


async def test_checkout_order_creation_failure_keeps_cart(
    client: AsyncClient,
    backend: MagicMock,
    filled_cart: dict,
    auth_headers: dict
):
    backend.insert.side_effect = http_error()

    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "mercadopago"},
        headers={**filled_cart, **auth_headers}
    )

    assert response.status_code == 500
    backend.update.assert_not_called()
    cart = await client.get("/api/v1/cart", headers=filled_cart)
    assert cart.json()["items_count"] == 2


async def test_checkout_payment_failure_returns_502_and_keeps_cart(
    client: AsyncClient,
    backend: MagicMock,
    filled_cart: dict,
    auth_headers: dict
):
    backend.invoke.side_effect = http_error(502)

    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "mercadopago"},
        headers={**filled_cart, **auth_headers}
    )

    assert response.status_code == 502
    cart = await client.get("/api/v1/cart", headers=filled_cart)
    assert cart.json()["items_count"] == 2


async def test_checkout_requires_authentication(client: AsyncClient, cart_session: str):
    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "mercadopago"},
        headers={"X-Session-Id": cart_session}
    )

    assert response.status_code in (401, 403)


async def test_checkout_reprices_cart_when_promotion_has_ended(
    client: AsyncClient,
    backend: MagicMock,
    filled_cart: dict,
    auth_headers: dict
):
    # Товар добавлен по акции, к оформлению заказа акция закончилась
    backend.orders_route.payment_method = "cash_on_delivery"
    backend.select.side_effect = route_tables({
        "products": [product_data("prod-1", price=100)],
        "promotion_products": [],
        "orders": backend.orders_route,
    })

    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "cash_on_delivery"},
        headers={**filled_cart, **auth_headers}
    )

    assert response.status_code == 200
    assert backend.insert.call_args_list[0].kwargs["json"]["total"] == 200
    assert backend.insert.call_args_list[1].kwargs["json"][0]["price_at_time"] == 100


async def test_checkout_rejects_product_removed_from_catalog(
    client: AsyncClient,
    backend: MagicMock,
    filled_cart: dict,
    auth_headers: dict
):
    backend.select.side_effect = route_tables({"products": [], "promotion_products": []})

    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "mercadopago"},
        headers={**filled_cart, **auth_headers}
    )

    assert response.status_code == 409
    backend.insert.assert_not_called()
    cart = await client.get("/api/v1/cart", headers=filled_cart)
    assert cart.json()["items_count"] == 2


async def test_checkout_cancels_order_when_items_cannot_be_stored(
    client: AsyncClient,
    backend: MagicMock,
    filled_cart: dict,
    auth_headers: dict
):
    backend.insert.side_effect = [[{"id": ORDER_ID}], http_error()]

    response = await client.post(
        "/api/v1/checkout",
        json={"shipping_address": SHIPPING_ADDRESS, "payment_method": "mercadopago"},
        headers={**filled_cart, **auth_headers}
    )

    assert response.status_code == 500
    backend.update.assert_called_once()
    update_call = backend.update.call_args
    assert update_call.args[0] == "orders"
    assert update_call.kwargs["filters"] == {"id": f"eq.{ORDER_ID}"}
    assert update_call.kwargs["json"] == {"status": "cancelled", "payment_status": "failed"}
    backend.invoke.assert_not_called()

    cart = await client.get("/api/v1/cart", headers=filled_cart)
    assert cart.json()["items_count"] == 2

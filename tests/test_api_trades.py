"""HTTP tests for the trade journal."""
import pytest
from fastapi import status

from tests.conftest import bearer, signup_user

EXAMPLE_TRADE = {
    "symbol": "aapl",
    "entryPrice": "100",
    "exitPrice": "110",
    "quantity": "10.7",
    "pnl": "95.5",
    "tradeDate": "2024-01-05",
}


@pytest.fixture
async def auth_headers(client):
    response = await signup_user(client, email="alice@example.com")
    client.cookies.clear()
    return bearer(response)


@pytest.mark.asyncio
async def test_create_trade_example(client, auth_headers):
    response = await client.post("/api/trades", json=EXAMPLE_TRADE, headers=auth_headers)

    assert response.status_code == status.HTTP_201_CREATED
    trade = response.json()["trade"]
    assert trade["symbol"] == "AAPL"
    assert trade["quantity"] == 10
    assert trade["entryPrice"] == 100
    assert trade["exitPrice"] == 110
    assert trade["pnl"] == 95.5
    assert trade["tradeDate"].startswith("2024-01-05T00:00:00")
    assert trade["source"] == "MANUAL"
    assert trade["goodNotes"] is None
    assert trade["badNotes"] is None
    assert trade["broker"] is None
    assert trade["externalId"] is None
    assert set(trade) == {
        "id", "symbol", "entryPrice", "exitPrice", "quantity", "pnl", "tradeDate",
        "goodNotes", "badNotes", "source", "broker", "externalId",
    }


@pytest.mark.asyncio
async def test_created_trade_round_trips_through_list(client, auth_headers):
    submitted = {
        "symbol": "  msft ",
        "entryPrice": 412.37,
        "exitPrice": "398.12345678",
        "quantity": -25,
        "pnl": "-356.25",
        "tradeDate": "2024-02-29T15:45:00Z",
        "goodNotes": "  cut it at the stop ",
        "badNotes": "   ",
        "source": "BROKER",
        "broker": "IBKR",
        "externalId": "ord-991",
    }
    created = await client.post("/api/trades", json=submitted, headers=auth_headers)
    assert created.status_code == status.HTTP_201_CREATED

    response = await client.get("/api/trades", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    trades = response.json()["trades"]

    assert trades == [created.json()["trade"]]
    trade = trades[0]
    assert trade["symbol"] == "MSFT"
    assert trade["entryPrice"] == 412.37
    assert trade["exitPrice"] == 398.12345678
    assert trade["quantity"] == -25
    assert trade["pnl"] == -356.25
    assert trade["tradeDate"].startswith("2024-02-29T15:45:00")
    assert trade["goodNotes"] == "cut it at the stop"
    assert trade["badNotes"] is None
    assert trade["source"] == "BROKER"
    assert trade["broker"] == "IBKR"
    assert trade["externalId"] == "ord-991"


@pytest.mark.parametrize("override, message", [
    ({"symbol": "  "}, "Symbol is required."),
    ({"entryPrice": "abc"}, "Entry price must be a valid number."),
    ({"exitPrice": None}, "Exit price must be a valid number."),
    ({"quantity": ""}, "Quantity must be a valid number."),
    ({"pnl": "NaN"}, "PnL must be a valid number."),
    ({"tradeDate": "yesterday"}, "Trade date is invalid."),
])
@pytest.mark.asyncio
async def test_invalid_trade_is_rejected(client, auth_headers, override, message):
    response = await client.post("/api/trades", json={**EXAMPLE_TRADE, **override}, headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": message}

    listing = await client.get("/api/trades", headers=auth_headers)
    assert listing.json() == {"trades": []}


@pytest.mark.asyncio
async def test_malformed_body_is_rejected_after_auth(client, auth_headers):
    response = await client.post(
        "/api/trades",
        content=b"{not json",
        headers={**auth_headers, "Content-Type": "application/json"}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Invalid request payload."}

    response = await client.post("/api/trades", headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Invalid trade payload."}


@pytest.mark.asyncio
async def test_trades_are_listed_newest_first(client, auth_headers):
    for symbol, trade_date in [("mid", "2024-02-01"), ("old", "2023-12-31"), ("new", "2024-03-15")]:
        await client.post(
            "/api/trades",
            json={**EXAMPLE_TRADE, "symbol": symbol, "tradeDate": trade_date},
            headers=auth_headers
        )

    response = await client.get("/api/trades", headers=auth_headers)

    assert [t["symbol"] for t in response.json()["trades"]] == ["NEW", "MID", "OLD"]


@pytest.mark.asyncio
async def test_same_day_trades_list_latest_insert_first(client, auth_headers):
    for symbol in ("first", "second", "third"):
        await client.post("/api/trades", json={**EXAMPLE_TRADE, "symbol": symbol}, headers=auth_headers)

    response = await client.get("/api/trades", headers=auth_headers)

    assert [t["symbol"] for t in response.json()["trades"]] == ["THIRD", "SECOND", "FIRST"]


@pytest.mark.asyncio
async def test_users_never_see_each_others_trades(client, auth_headers):
    bob = await signup_user(client, email="bob@example.com")
    client.cookies.clear()
    bob_headers = bearer(bob)

    await client.post("/api/trades", json={**EXAMPLE_TRADE, "symbol": "alice"}, headers=auth_headers)
    await client.post(
        "/api/trades",
        json={**EXAMPLE_TRADE, "symbol": "bob", "tradeDate": "1999-01-01"},
        headers=bob_headers
    )

    alice_trades = (await client.get("/api/trades", headers=auth_headers)).json()["trades"]
    bob_trades = (await client.get("/api/trades", headers=bob_headers)).json()["trades"]

    assert [t["symbol"] for t in alice_trades] == ["ALICE"]
    assert [t["symbol"] for t in bob_trades] == ["BOB"]


@pytest.mark.asyncio
async def test_summary(client, auth_headers):
    for pnl in ("150", "-50", "0"):
        await client.post("/api/trades", json={**EXAMPLE_TRADE, "pnl": pnl}, headers=auth_headers)

    response = await client.get("/api/trades/summary", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "summary": {
            "totalTrades": 3,
            "totalPnl": 100.0,
            "averagePnl": 33.33333333,
            "winRate": 66.67,
        }
    }


@pytest.mark.asyncio
async def test_summary_without_trades(client, auth_headers):
    response = await client.get("/api/trades/summary", headers=auth_headers)

    assert response.json() == {
        "summary": {"totalTrades": 0, "totalPnl": 0.0, "averagePnl": 0.0, "winRate": 0.0}
    }


@pytest.mark.asyncio
async def test_fifteen_digit_prices_round_trip_as_json_numbers(client, auth_headers):
    submitted = {**EXAMPLE_TRADE, "entryPrice": "1234567.12345678", "pnl": "-99999999999999.9"}
    created = await client.post("/api/trades", json=submitted, headers=auth_headers)
    assert created.status_code == status.HTTP_201_CREATED

    response = await client.get("/api/trades", headers=auth_headers)
    trade = response.json()["trades"][0]

    assert '"entryPrice":1234567.12345678' in response.text
    assert repr(trade["entryPrice"]) == "1234567.12345678"
    assert repr(trade["pnl"]) == "-99999999999999.9"


@pytest.mark.asyncio
@pytest.mark.parametrize("field, value, message", [
    ("entryPrice", "12345678901234.12345678", "Entry price has too many significant digits."),
    ("pnl", "1.123456789", "PnL has too many decimal places."),
])
async def test_prices_that_cannot_be_kept_exactly_are_rejected(client, auth_headers, field, value, message):
    response = await client.post("/api/trades", json={**EXAMPLE_TRADE, field: value}, headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": message}

    listed = await client.get("/api/trades", headers=auth_headers)
    assert listed.json() == {"trades": []}

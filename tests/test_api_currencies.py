from household_finance.models.constants import SEED_CURRENCIES


def _url(household_id):
    return f"/households/{household_id}/currencies"


def test_reference_currencies(client):
    resp = client.get("/currencies")
    assert resp.status_code == 200
    codes = [c["id"] for c in resp.json()]
    assert codes == sorted(c["id"] for c in SEED_CURRENCIES)


def test_new_household_has_starter_currencies(client, owner_headers, household_id):
    body = client.get(_url(household_id), headers=owner_headers).json()
    assert body["primary_currency"] == "ARS"
    assert [c["currency_id"] for c in body["currencies"]] == ["ARS", "USD"]
    assert body["currencies"][1]["currency"]["symbol"] == "US$"


def test_enable_currency(client, owner_headers, household_id):
    resp = client.post(_url(household_id), json={"currency_id": "eur"}, headers=owner_headers)
    assert resp.status_code == 201
    assert [c["currency_id"] for c in resp.json()["currencies"]] == ["ARS", "USD", "EUR"]

    dup = client.post(_url(household_id), json={"currency_id": "EUR"}, headers=owner_headers)
    assert dup.status_code == 409


def test_enable_unknown_currency(client, owner_headers, household_id):
    resp = client.post(_url(household_id), json={"currency_id": "XYZ"}, headers=owner_headers)
    assert resp.status_code == 400


def test_enable_as_primary(client, owner_headers, household_id):
    resp = client.post(
        _url(household_id),
        json={"currency_id": "BRL", "is_primary": True},
        headers=owner_headers,
    )
    body = resp.json()
    assert body["primary_currency"] == "BRL"
    assert sum(1 for c in body["currencies"] if c["is_primary"]) == 1


def test_switch_primary(client, owner_headers, household_id):
    resp = client.put(
        f"{_url(household_id)}/primary", json={"currency_id": "usd"}, headers=owner_headers
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["primary_currency"] == "USD"
    assert [c["currency_id"] for c in body["currencies"] if c["is_primary"]] == ["USD"]


def test_primary_must_be_enabled(client, owner_headers, household_id):
    resp = client.put(
        f"{_url(household_id)}/primary", json={"currency_id": "EUR"}, headers=owner_headers
    )
    assert resp.status_code == 400

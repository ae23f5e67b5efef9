"""HTTP tests for debts, transactions and allocations."""
from decimal import Decimal


def _debt_payload(seed, price="1000000", item=None):
    return {
        "project_id": seed.project.id,
        "person_id": seed.ana.id,
        "due_date": "2026-03-31",
        "note": "Materiales",
        "lines": [
            {
                "item_id": (item or seed.cement).id,
                "unit_id": seed.bag.id,
                "quantity": "1",
                "unit_price": price,
            }
        ],
    }


def _tx_payload(seed, code, amount):
    return {
        "project_id": seed.project.id,
        "from_person_id": seed.beto.id,
        "to_person_id": seed.ana.id,
        "code": code,
        "due_date": "2026-03-01",
        "amount_paid": amount,
        "payment_type": "csh",
        "transaction_type": "TRN",
    }


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "message" in response.json()


def test_allocation_flow(client, seed):
    debt = client.post("/debts/", json=_debt_payload(seed))
    assert debt.status_code == 201
    debt_id = debt.json()["header"]["id"]
    assert Decimal(debt.json()["total_amount"]) == Decimal("1000000")

    first = client.post("/transactions/", json=_tx_payload(seed, "REC-1", "600000"))
    second = client.post("/transactions/", json=_tx_payload(seed, "REC-2", "500000"))
    assert first.status_code == 201
    assert first.json()["payment_type"] == "CSH"

    created = client.post(
        f"/debts/{debt_id}/allocations",
        json={"transaction_id": first.json()["id"], "covered_amount": "600000", "note": "anticipo"},
    )
    assert created.status_code == 201
    allocation_id = created.json()["id"]

    view = client.get(f"/debts/{debt_id}/view").json()
    assert Decimal(view["remaining_amount"]) == Decimal("400000")
    assert view["allocations"][0]["transaction_code"] == "REC-1"

    over = client.post(
        f"/debts/{debt_id}/allocations",
        json={"transaction_id": second.json()["id"], "covered_amount": "500000"},
    )
    assert over.status_code == 400
    assert over.json()["error"] == "OVER_ALLOCATION"

    duplicate = client.post(
        f"/transactions/{first.json()['id']}/allocations",
        json={"debt_id": debt_id, "covered_amount": "1"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "DUPLICATE_ALLOCATION"

    updated = client.put(
        f"/debts/{debt_id}/allocations/{allocation_id}",
        json={"transaction_id": first.json()["id"], "covered_amount": "500000"},
    )
    assert updated.status_code == 200
    assert Decimal(updated.json()["covered_amount"]) == Decimal("500000")

    candidates = client.get(
        f"/debts/{debt_id}/allocation-candidates/transactions",
        params={"allocation_id": allocation_id},
    ).json()
    by_id = {c["id"]: c for c in candidates}
    assert Decimal(by_id[first.json()["id"]]["editable_remaining_amount"]) == Decimal("600000")

    blocked = client.delete(f"/debts/{debt_id}")
    assert blocked.status_code == 400
    assert blocked.json()["error"] == "ALLOCATION_EXISTS"

    removed = client.delete(f"/transactions/{first.json()['id']}/allocations/{allocation_id}")
    assert removed.status_code == 204
    assert client.get(f"/debts/{debt_id}/allocations").json() == []

    assert client.delete(f"/debts/{debt_id}").status_code == 204
    assert client.get(f"/debts/{debt_id}").status_code == 404


def test_allocation_for_missing_debt(client, seed):
    response = client.post("/debts/404/allocations", json={"transaction_id": 1, "covered_amount": "10"})

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


def test_fractional_covered_amount_is_a_validation_error(client, seed):
    response = client.post("/debts/1/allocations", json={"transaction_id": 1, "covered_amount": "10.5"})

    assert response.status_code == 422


def test_person_rule_over_http(client, seed):
    debt_id = client.post("/debts", json=_debt_payload(seed)).json()["header"]["id"]
    payload = _tx_payload(seed, "REC-9", "1000")
    payload["to_person_id"] = seed.carla.id
    tx_id = client.post("/transactions", json=payload).json()["id"]

    response = client.post(f"/debts/{debt_id}/allocations", json={"transaction_id": tx_id, "covered_amount": "10"})

    assert response.status_code == 400
    assert response.json()["error"] == "ALLOCATION_NOT_ALLOWED"


def test_open_debts_and_debt_candidates(client, seed):
    debt_id = client.post("/debts/", json=_debt_payload(seed)).json()["header"]["id"]
    client.post("/debts/", json=_debt_payload(seed, price="300", item=seed.sand))
    tx_id = client.post("/transactions/", json=_tx_payload(seed, "REC-1", "300")).json()["id"]

    open_rows = client.get("/debts/open", params={"project_id": seed.project.id}).json()
    assert len(open_rows) == 2

    candidates = client.get(f"/transactions/{tx_id}/allocation-candidates/debts").json()
    assert {c["id"] for c in candidates} >= {debt_id}
    assert all(c["person_title"] == "Ana Pérez" for c in candidates)


def test_update_debt_over_http(client, seed):
    debt_id = client.post("/debts/", json=_debt_payload(seed)).json()["header"]["id"]
    payload = _debt_payload(seed, price="250")
    payload["lines"][0]["quantity"] = "4"

    response = client.put(f"/debts/{debt_id}", json=payload)

    assert response.status_code == 200
    assert Decimal(response.json()["total_amount"]) == Decimal("1000")


def test_duplicate_transaction_code(client, seed):
    client.post("/transactions/", json=_tx_payload(seed, "REC-1", "100"))

    response = client.post("/transactions/", json=_tx_payload(seed, "rec-1", "100"))

    assert response.status_code == 409
    assert response.json()["error"] == "DUPLICATE_CODE"


def test_ledger_and_balances(client, seed):
    for code, amount, payer, receiver, when in [
        ("T1", "100", seed.beto, seed.ana, "2026-03-01T09:00:00"),
        ("T2", "30", seed.ana, seed.beto, "2026-03-02T09:00:00"),
        ("T3", "50", seed.carla, seed.ana, "2026-03-03T09:00:00"),
    ]:
        payload = _tx_payload(seed, code, amount)
        payload.update(from_person_id=payer.id, to_person_id=receiver.id, registered_at=when)
        assert client.post("/transactions/", json=payload).status_code == 201

    ledger = client.get(
        "/transactions/ledger", params={"project_id": seed.project.id, "person_id": seed.ana.id}
    ).json()
    assert [Decimal(r["running_balance"]) for r in ledger] == [Decimal("100"), Decimal("70"), Decimal("120")]

    person = client.get(
        "/transactions/balance/person", params={"project_id": seed.project.id, "person_id": seed.ana.id}
    ).json()
    assert Decimal(person["net"]) == Decimal("120")

    pair = client.get(
        "/transactions/balance/pair",
        params={"project_id": seed.project.id, "from_person_id": seed.ana.id, "to_person_id": seed.ana.id},
    )
    assert pair.status_code == 400
    assert pair.json()["error"] == "INVALID_REQUEST"


def test_transaction_crud(client, seed):
    tx = client.post("/transactions/", json=_tx_payload(seed, "REC-1", "100")).json()

    payload = _tx_payload(seed, "REC-1", "150")
    payload["note"] = "corregido"
    updated = client.put(f"/transactions/{tx['id']}", json=payload)
    assert updated.status_code == 200
    assert Decimal(updated.json()["amount_paid"]) == Decimal("150")

    assert len(client.get("/transactions/", params={"project_id": seed.project.id}).json()) == 1
    assert client.delete(f"/transactions/{tx['id']}").status_code == 204
    assert client.get(f"/transactions/{tx['id']}").status_code == 404

from types import SimpleNamespace

import pytest

from wanderplan.domain.expenses.calculations import (
    calculate_balances,
    calculate_custom_split,
    calculate_equal_split,
    calculate_settlements,
)


def _expense(paid_by, amount, splits, currency="USD"):
    return SimpleNamespace(
        paid_by=paid_by,
        amount=amount,
        currency=currency,
        splits=[SimpleNamespace(user_id=u, amount=a) for u, a in splits],
    )


def test_equal_split_gives_remainder_to_first_user():
    assert calculate_equal_split(100, ["a", "b", "c"]) == [("a", 33.34), ("b", 33.33), ("c", 33.33)]


def test_equal_split_needs_users():
    with pytest.raises(ValueError):
        calculate_equal_split(10, [])


def test_custom_split_by_percentage_adds_up():
    shares = calculate_custom_split(
        100, [{"userId": "a", "percentage": 33.33}, {"userId": "b", "percentage": 33.33}, {"userId": "c", "percentage": 33.34}]
    )

    assert round(sum(amount for _, amount in shares), 2) == 100.0


def test_custom_split_amounts_must_match_total():
    with pytest.raises(ValueError, match="add up"):
        calculate_custom_split(100, [{"userId": "a", "amount": 60}, {"userId": "b", "amount": 30}])


def test_custom_split_cannot_mix_forms():
    with pytest.raises(ValueError, match="all use"):
        calculate_custom_split(100, [{"userId": "a", "amount": 50}, {"userId": "b", "percentage": 50}])


def test_balances_and_settlements():
    expenses = [
        _expense("alice", 90, [("alice", 30), ("bob", 30), ("carol", 30)]),
        _expense("bob", 30, [("alice", 15), ("bob", 15)]),
        _expense("carol", 12, [], currency="EUR"),
    ]

    balances = calculate_balances(expenses)

    assert balances["USD"] == {"alice": 45.0, "bob": -15.0, "carol": -30.0}
    assert balances["EUR"] == {"carol": 0.0}
    settlements = calculate_settlements(balances["USD"], "USD")
    assert settlements == [
        {"from": "carol", "to": "alice", "amount": 30.0, "currency": "USD"},
        {"from": "bob", "to": "alice", "amount": 15.0, "currency": "USD"},
    ]


def test_expense_endpoint_splits_equally(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    friend = make_user("friend@example.com")
    add_collaborator(trip, friend, role="EDITOR")

    response = client.post(
        f"/api/trips/{trip.id}/expenses",
        json={
            "description": "Dinner",
            "amount": 100,
            "category": "FOOD",
            "date": "2030-05-02T20:00:00Z",
            "splitType": "EQUAL",
            "splitWithUserIds": [owner.id, friend.id],
        },
        headers=auth_headers(owner),
    )

    assert response.status_code == 201
    splits = {s["userId"]: s["amount"] for s in response.json()["expense"]["splits"]}
    assert splits == {owner.id: 50.0, friend.id: 50.0}

    settle = client.get(f"/api/trips/{trip.id}/expenses/settlements", headers=auth_headers(friend)).json()
    assert settle["settlements"] == [{"from": friend.id, "to": owner.id, "amount": 50.0, "currency": "USD"}]


def test_expense_cannot_be_split_with_outsiders(client, owner, make_user, make_trip, auth_headers):
    trip = make_trip(owner)
    outsider = make_user("outsider@example.com")

    response = client.post(
        f"/api/trips/{trip.id}/expenses",
        json={
            "description": "Taxi",
            "amount": 40,
            "date": "2030-05-02T20:00:00Z",
            "splitType": "EQUAL",
            "splitWithUserIds": [owner.id, outsider.id],
        },
        headers=auth_headers(owner),
    )

    assert response.status_code == 400


def test_viewer_cannot_add_expense(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    viewer = make_user("viewer@example.com")
    add_collaborator(trip, viewer, role="VIEWER")

    response = client.post(
        f"/api/trips/{trip.id}/expenses",
        json={"description": "Taxi", "amount": 40, "date": "2030-05-02T20:00:00Z"},
        headers=auth_headers(viewer),
    )

    assert response.status_code == 403


def _add_dinner(client, trip, headers, amount=100, split_with=None):
    body = {"description": "Dinner", "amount": amount, "category": "FOOD", "date": "2030-05-02T20:00:00Z"}
    if split_with:
        body.update({"splitType": "EQUAL", "splitWithUserIds": split_with})
    response = client.post(f"/api/trips/{trip.id}/expenses", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["expense"]


def test_changing_the_amount_keeps_split_proportions(
    client, owner, make_user, make_trip, add_collaborator, auth_headers
):
    trip = make_trip(owner)
    friend = make_user("friend@example.com")
    add_collaborator(trip, friend, role="EDITOR")
    expense = _add_dinner(client, trip, auth_headers(owner), split_with=[owner.id, friend.id])

    response = client.patch(
        f"/api/trips/{trip.id}/expenses/{expense['id']}",
        json={"amount": 60, "description": "Late dinner"},
        headers=auth_headers(owner),
    )

    assert response.status_code == 200
    updated = response.json()["expense"]
    assert updated["amount"] == 60.0
    assert updated["description"] == "Late dinner"
    assert {s["userId"]: s["amount"] for s in updated["splits"]} == {owner.id: 30.0, friend.id: 30.0}


def test_patch_unknown_expense_is_404(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.patch(
        f"/api/trips/{trip.id}/expenses/00000000-0000-4000-8000-000000000000",
        json={"amount": 10},
        headers=auth_headers(owner),
    )

    assert response.status_code == 404


def test_payer_can_delete_own_expense_but_not_others(
    client, owner, make_user, make_trip, add_collaborator, auth_headers
):
    trip = make_trip(owner)
    editor = make_user("editor@example.com")
    add_collaborator(trip, editor, role="EDITOR")
    owners = _add_dinner(client, trip, auth_headers(owner))
    editors = _add_dinner(client, trip, auth_headers(editor), amount=20)

    forbidden = client.delete(f"/api/trips/{trip.id}/expenses/{owners['id']}", headers=auth_headers(editor))
    allowed = client.delete(f"/api/trips/{trip.id}/expenses/{editors['id']}", headers=auth_headers(editor))
    remaining = client.get(f"/api/trips/{trip.id}/expenses", headers=auth_headers(owner)).json()

    assert forbidden.status_code == 403
    assert allowed.status_code == 200
    assert [e["id"] for e in remaining["expenses"]] == [owners["id"]]
    assert remaining["summary"]["totalAmount"] == 100.0


def test_budget_upsert_and_spending_summary(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    empty = client.get(f"/api/trips/{trip.id}/budget", headers=auth_headers(owner))
    assert empty.status_code == 200
    assert empty.json()["budget"] is None

    first = client.put(
        f"/api/trips/{trip.id}/budget",
        json={"totalBudget": 500, "currency": "USD"},
        headers=auth_headers(owner),
    )
    second = client.put(
        f"/api/trips/{trip.id}/budget",
        json={"totalBudget": 1000, "currency": "USD", "categoryBudgets": {"FOOD": 200}},
        headers=auth_headers(owner),
    )
    assert first.status_code == second.status_code == 200
    assert first.json()["budget"]["id"] == second.json()["budget"]["id"]

    _add_dinner(client, trip, auth_headers(owner))
    budget = client.get(f"/api/trips/{trip.id}/budget", headers=auth_headers(owner)).json()["budget"]

    assert budget["totalBudget"] == 1000.0
    assert budget["totalSpent"] == 100.0
    assert budget["remaining"] == 900.0
    assert budget["percentUsed"] == 10.0
    assert budget["categories"]["FOOD"] == {"budget": 200.0, "spent": 100.0, "remaining": 100.0}


def test_viewer_cannot_set_budget(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    viewer = make_user("viewer@example.com")
    add_collaborator(trip, viewer, role="VIEWER")

    response = client.put(f"/api/trips/{trip.id}/budget", json={"totalBudget": 100}, headers=auth_headers(viewer))

    assert response.status_code == 403

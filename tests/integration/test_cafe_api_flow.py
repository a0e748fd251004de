from datetime import date, datetime, timedelta, timezone


def test_event_registration_flow(client, make_customer):
    customer = make_customer()

    create_response = client.post(
        "/events",
        json={
            "title": "Wingspan Tournament",
            "event_type": "TOURNAMENT",
            "event_date": (datetime.now(timezone.utc) + timedelta(days=5)).isoformat(),
            "max_participants": 1,
            "ticket_price": "15.00",
        },
    )
    assert create_response.status_code == 201
    event_id = create_response.json()["id"]

    register_response = client.post(
        f"/events/{event_id}/register",
        json={"customer_id": customer.id},
    )
    assert register_response.status_code == 201
    assert register_response.json()["status"] == "REGISTERED"
    assert register_response.json()["payment_status"] == "PENDING"
    assert register_response.json()["customer_name"] == customer.full_name
    assert register_response.json()["customer_email"] == customer.email

    duplicate_response = client.post(
        f"/events/{event_id}/register",
        json={"customer_id": customer.id},
    )
    assert duplicate_response.status_code == 409
    assert duplicate_response.json()["detail"] == "Already registered"

    full_response = client.post(
        f"/events/{event_id}/register",
        json={"customer_id": make_customer().id},
    )
    assert full_response.status_code == 409
    assert full_response.json()["detail"] == "Event full"

    participants = client.get(f"/events/{event_id}/participants").json()
    assert [p["customer_email"] for p in participants] == [customer.email]

    cancel_response = client.delete(
        f"/events/{event_id}/register",
        params={"customer_id": customer.id},
    )
    assert cancel_response.status_code == 204
    assert client.get(f"/events/{event_id}").json()["current_participants"] == 0

    missing_response = client.post(
        "/events/missing/register",
        json={"customer_id": customer.id},
    )
    assert missing_response.status_code == 404


def test_past_event_is_rejected(client):
    response = client.post(
        "/events",
        json={
            "title": "Yesterday",
            "event_date": (datetime.now(timezone.utc) - timedelta(days=1)).isoformat(),
            "max_participants": 4,
        },
    )

    assert response.status_code == 400


def test_order_flow(client, make_customer, make_menu_item):
    customer = make_customer(loyalty_points=300)
    item = make_menu_item()

    order_id = client.post("/orders", json={"customer_id": customer.id}).json()["id"]

    add_response = client.post(
        f"/orders/{order_id}/items",
        json={"menu_item_id": item.id, "quantity": 3},
    )
    assert add_response.status_code == 200
    assert add_response.json()["subtotal"] == "30.00"

    submit_response = client.post(
        f"/orders/{order_id}/submit",
        json={"loyalty_points_to_redeem": 200},
    )
    assert submit_response.status_code == 200
    assert submit_response.json()["status"] == "SUBMITTED"
    assert submit_response.json()["total_amount"] == "30.40"

    pay_response = client.post(f"/orders/{order_id}/pay", json={"payment_method": "CARD"})
    assert pay_response.status_code == 200
    assert pay_response.json()["status"] == "COMPLETED"

    loyalty = client.get(f"/customers/{customer.id}/loyalty").json()
    assert loyalty["current_balance"] == 130
    assert loyalty["current_tier"] == "BRONZE"
    assert loyalty["points_to_next_tier"] == 370

    history = client.get(f"/customers/{customer.id}/loyalty/history").json()
    assert {entry["transaction_type"] for entry in history} == {"REDEEMED", "EARNED"}

    cancel_response = client.post(f"/orders/{order_id}/cancel")
    assert cancel_response.status_code == 409


def test_reservation_flow(client, make_customer, make_table):
    customer = make_customer()
    table = make_table(seating_capacity=4)
    tomorrow = (date.today() + timedelta(days=1)).isoformat()

    check_response = client.post(
        "/reservations/validate",
        json={
            "reservation_date": tomorrow,
            "start_time": "21:00",
            "end_time": "23:00",
            "party_size": 2,
        },
    )
    assert check_response.json() == {
        "is_valid": False,
        "reason": "Reservation must be within business hours (10:00 - 22:00)",
    }

    payload = {
        "customer_id": customer.id,
        "table_id": table.id,
        "reservation_date": tomorrow,
        "start_time": "18:00",
        "end_time": "20:00",
        "party_size": 4,
    }
    create_response = client.post("/reservations", json=payload)
    assert create_response.status_code == 201
    assert create_response.json()["status"] == "CONFIRMED"

    assert client.post("/reservations", json=payload).status_code == 409

    availability = client.get(
        "/reservations/availability",
        params={
            "reservation_date": tomorrow,
            "start_time": "18:30",
            "end_time": "19:30",
            "party_size": 2,
        },
    )
    assert availability.status_code == 200
    assert availability.json() == []

    reservation_id = create_response.json()["id"]
    assert client.delete(f"/reservations/{reservation_id}").status_code == 204
    assert client.post("/reservations", json=payload).status_code == 201

    # a cancelled reservation stays cancelled
    repeat_cancel = client.delete(f"/reservations/{reservation_id}")
    assert repeat_cancel.status_code == 409
    assert "CANCELLED -> CANCELLED" in repeat_cancel.json()["detail"]

import pytest

DAY = "2031-06-04"  # Wednesday, Oslo is UTC+2


def register(client, email="owner@example.com", tz="Europe/Oslo", **kwargs):
    payload = {
        "email": email,
        "password": "SecurePass123!",
        "full_name": "Kari Nordmann",
        "business_name": "Studio Nord",
        "timezone": tz,
    }
    payload.update(kwargs)
    return client.post("/api/v1/auth/register", json=payload)


@pytest.fixture
def owner(client):
    response = register(client)
    assert response.status_code == 201
    data = response.json()
    return {
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
        "provider_id": data["provider_id"],
        "username": data["username"],
    }


def create_service(client, owner, **kwargs):
    payload = {"name": "Haircut", "price": 500, "duration": 60}
    payload.update(kwargs)
    response = client.post("/api/v1/dashboard/services", json=payload, headers=owner["headers"])
    assert response.status_code == 201
    return response.json()


def availability(client, owner, service, day=DAY, **params):
    return client.get(
        "/api/v1/public/availability",
        params={"provider_id": owner["provider_id"], "service_id": service["id"], "date": day, **params},
    )


def book(client, owner, service, start, email="ola@example.com", **kwargs):
    payload = {
        "provider_id": owner["provider_id"],
        "service_id": service["id"],
        "start_time": start,
        "customer_name": "Ola Nordmann",
        "customer_email": email,
    }
    payload.update(kwargs)
    return client.post("/api/v1/public/bookings", json=payload)


# ============================================================================
# Auth
# ============================================================================

def test_register_login_and_me(client):
    response = register(client)
    assert response.status_code == 201
    assert response.json()["role"] == "provider"
    assert response.json()["username"] == "studio-nord"

    login = client.post(
        "/api/v1/auth/login", json={"email": "OWNER@example.com", "password": "SecurePass123!"}
    )
    assert login.status_code == 200

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"})
    assert me.status_code == 200
    assert me.json()["provider"]["timezone"] == "Europe/Oslo"


def test_register_rejections(client):
    assert register(client).status_code == 201
    assert register(client).status_code == 400
    assert register(client, email="admin@example.com", role="admin").status_code == 400
    assert register(client, email="mars@example.com", tz="Mars/Base").status_code == 400
    assert register(client, email="short@example.com", password="short").status_code == 422


def test_bad_login_and_missing_token(client):
    register(client)

    bad = client.post("/api/v1/auth/login", json={"email": "owner@example.com", "password": "wrong-password"})
    assert bad.status_code == 401

    assert client.get("/api/v1/dashboard/services").status_code in (401, 403)
    assert client.get(
        "/api/v1/dashboard/services", headers={"Authorization": "Bearer not-a-token"}
    ).status_code == 401


def test_customer_cannot_use_dashboard(client):
    customer = register(client, email="customer@example.com", role="customer").json()

    response = client.get(
        "/api/v1/dashboard/services", headers={"Authorization": f"Bearer {customer['access_token']}"}
    )

    assert response.status_code == 403


def test_auth_endpoints_are_rate_limited(client):
    for _ in range(5):
        client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "wrong-password"})

    blocked = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "wrong-password"})

    assert blocked.status_code == 429
    assert "Retry-After" in blocked.headers


def _pending_reset_token(db):
    from slotwise.models import PasswordReset

    return db.query(PasswordReset).filter(PasswordReset.is_used == False).one().token


def test_forgot_and_reset_password(client, db):
    register(client)
    message = "If an account exists with that email, a password reset link has been sent."

    unknown = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})
    known = client.post("/api/v1/auth/forgot-password", json={"email": "owner@example.com"})
    assert unknown.status_code == known.status_code == 200
    assert unknown.json()["message"] == known.json()["message"] == message

    reset = client.post(
        "/api/v1/auth/reset-password",
        json={"token": _pending_reset_token(db), "new_password": "BrandNewPass456!"},
    )
    assert reset.status_code == 200

    login = client.post("/api/v1/auth/login", json={"email": "owner@example.com", "password": "BrandNewPass456!"})
    assert login.status_code == 200


def test_reset_token_is_single_use(client, db):
    register(client)
    client.post("/api/v1/auth/forgot-password", json={"email": "owner@example.com"})
    payload = {"token": _pending_reset_token(db), "new_password": "BrandNewPass456!"}

    assert client.post("/api/v1/auth/reset-password", json=payload).status_code == 200
    assert client.post("/api/v1/auth/reset-password", json=payload).status_code == 400
    assert client.post(
        "/api/v1/auth/reset-password", json={"token": "not-a-token", "new_password": "BrandNewPass456!"}
    ).status_code == 404


# ============================================================================
# Dashboard
# ============================================================================

def test_service_crud(client, owner):
    service = create_service(client, owner, buffer_time_after=15, max_concurrent=2)
    assert service["formatted_duration"]
    assert service["max_concurrent"] == 2

    updated = client.put(
        f"/api/v1/dashboard/services/{service['id']}", json={"price": 650, "duration": 45}, headers=owner["headers"]
    )
    assert updated.json()["price"] == 650.0
    assert updated.json()["duration"] == 45

    deleted = client.delete(f"/api/v1/dashboard/services/{service['id']}", headers=owner["headers"])
    assert deleted.json()["message"] == "Service deactivated"

    listing = client.get("/api/v1/dashboard/services", headers=owner["headers"]).json()
    assert listing["total"] == 0
    everything = client.get(
        "/api/v1/dashboard/services", params={"include_inactive": True}, headers=owner["headers"]
    ).json()
    assert everything["total"] == 1


def test_service_validation_and_ownership(client, owner):
    assert client.post(
        "/api/v1/dashboard/services", json={"name": "Bad", "duration": 0}, headers=owner["headers"]
    ).status_code == 422
    assert client.post(
        "/api/v1/dashboard/services", json={"name": "Bad", "duration": 30, "max_concurrent": 0},
        headers=owner["headers"]
    ).status_code == 422

    service = create_service(client, owner)
    other = register(client, email="other@example.com", business_name="Other").json()
    other_headers = {"Authorization": f"Bearer {other['access_token']}"}

    assert client.get(f"/api/v1/dashboard/services/{service['id']}", headers=other_headers).status_code == 404


def test_hard_delete_blocked_by_bookings(client, owner):
    service = create_service(client, owner)
    assert book(client, owner, service, f"{DAY}T08:00:00Z").status_code == 201

    response = client.delete(
        f"/api/v1/dashboard/services/{service['id']}", params={"hard_delete": True}, headers=owner["headers"]
    )

    assert response.status_code == 400


def test_business_hours_default_and_replace(client, owner):
    current = client.get("/api/v1/dashboard/business-hours", headers=owner["headers"]).json()
    assert current["is_default"]
    assert sorted(h["day_of_week"] for h in current["business_hours"] if h["is_open"]) == [1, 2, 3, 4, 5]

    replaced = client.put(
        "/api/v1/dashboard/business-hours",
        json={"business_hours": [{"day_of_week": 6, "is_open": True, "open_time": "10:00", "close_time": "14:00"}]},
        headers=owner["headers"],
    )
    assert replaced.status_code == 200
    assert not replaced.json()["is_default"]

    service = create_service(client, owner)
    # Wednesday has no rule anymore
    assert availability(client, owner, service).json()["slots"] == []
    assert len(availability(client, owner, service, day="2031-06-07").json()["slots"]) == 4


def test_business_hours_validation(client, owner):
    duplicate = [
        {"day_of_week": 1, "open_time": "09:00", "close_time": "17:00"},
        {"day_of_week": 1, "open_time": "10:00", "close_time": "12:00"},
    ]
    inverted = [{"day_of_week": 1, "open_time": "17:00", "close_time": "09:00"}]
    bad_day = [{"day_of_week": 7}]

    for hours in (duplicate, inverted, bad_day):
        response = client.put(
            "/api/v1/dashboard/business-hours", json={"business_hours": hours}, headers=owner["headers"]
        )
        assert response.status_code == 422


def test_staff_and_overrides(client, owner):
    service = create_service(client, owner, requires_staff=True, any_staff_member=False)

    created = client.post(
        "/api/v1/dashboard/staff",
        json={"name": "Anna", "service_ids": [service["id"]]},
        headers=owner["headers"],
    )
    assert created.status_code == 201
    staff = created.json()
    assert staff["service_ids"] == [service["id"]]

    assert len(availability(client, owner, service).json()["slots"]) == 8

    override = client.post(
        f"/api/v1/dashboard/staff/{staff['id']}/availability",
        json={"start_time": f"{DAY}T00:00:00Z", "end_time": f"{DAY}T23:59:00Z", "reason": "Vacation"},
        headers=owner["headers"],
    )
    assert override.status_code == 201
    assert availability(client, owner, service).json()["slots"] == []

    detail = client.get(f"/api/v1/dashboard/staff/{staff['id']}", headers=owner["headers"]).json()
    assert len(detail["overrides"]) == 1

    removed = client.delete(
        f"/api/v1/dashboard/staff/{staff['id']}/availability/{override.json()['id']}", headers=owner["headers"]
    )
    assert removed.status_code == 200
    assert len(availability(client, owner, service).json()["slots"]) == 8

    client.delete(f"/api/v1/dashboard/staff/{staff['id']}", headers=owner["headers"])
    assert availability(client, owner, service).json()["slots"] == []


def test_staff_validation(client, owner):
    staff = client.post(
        "/api/v1/dashboard/staff",
        json={"name": "Anna"},
        headers=owner["headers"],
    ).json()

    response = client.post(
        f"/api/v1/dashboard/staff/{staff['id']}/availability",
        json={"start_time": f"{DAY}T10:00:00", "end_time": f"{DAY}T11:00:00"},
        headers=owner["headers"],
    )
    assert response.status_code == 422

    inverted = client.post(
        f"/api/v1/dashboard/staff/{staff['id']}/availability",
        json={"start_time": f"{DAY}T11:00:00Z", "end_time": f"{DAY}T10:00:00Z"},
        headers=owner["headers"],
    )
    assert inverted.status_code == 422

    import uuid

    assert client.post(
        "/api/v1/dashboard/staff",
        json={"name": "Bjorn", "service_ids": [str(uuid.uuid4())]},
        headers=owner["headers"],
    ).status_code == 400


# ============================================================================
# Public
# ============================================================================

def test_public_provider_page(client, owner):
    create_service(client, owner)

    page = client.get(f"/api/v1/public/providers/{owner['username']}")

    assert page.status_code == 200
    assert [s["name"] for s in page.json()["services"]] == ["Haircut"]
    assert client.get("/api/v1/public/providers/nobody-here").status_code == 404


def test_availability_in_provider_timezone(client, owner):
    service = create_service(client, owner)

    response = availability(client, owner, service)

    assert response.status_code == 200
    body = response.json()
    assert body["timezone"] == "Europe/Oslo"
    assert len(body["slots"]) == 8
    assert body["slots"][0]["start"] == "2031-06-04T07:00:00+00:00"
    assert body["slots"][-1]["end"] == "2031-06-04T15:00:00+00:00"

    same_zone = availability(client, owner, service, timezone="Europe/Oslo")
    assert same_zone.status_code == 200
    assert same_zone.json()["slots"] == body["slots"]


def test_availability_rejects_a_foreign_timezone(client, owner):
    service = create_service(client, owner)

    # 09:00 UTC would be listed but booking re-checks Oslo hours
    response = availability(client, owner, service, timezone="UTC")

    assert response.status_code == 400
    assert "Europe/Oslo" in response.json()["detail"]


def test_availability_errors(client, owner):
    import uuid

    service = create_service(client, owner)

    assert availability(client, owner, {"id": str(uuid.uuid4())}).status_code == 404
    assert availability(client, owner, service, day="someday").status_code == 400
    assert availability(client, owner, service, timezone="Mars/Base").status_code == 400


def test_booking_flow(client, owner):
    service = create_service(client, owner)

    created = book(client, owner, service, f"{DAY}T10:00:00+02:00", notes="First visit")
    assert created.status_code == 201
    booking = created.json()["booking"]
    assert booking["start_time"] == "2031-06-04T08:00:00+00:00"
    assert booking["status"] == "CONFIRMED"

    taken = book(client, owner, service, f"{DAY}T08:00:00Z", email="kari@example.com")
    assert taken.status_code == 409
    assert taken.json()["detail"]["reason"] == "fully_booked"

    slots = availability(client, owner, service).json()["slots"]
    assert "2031-06-04T08:00:00+00:00" not in [s["start"] for s in slots]
    assert len(slots) == 7

    ics = client.get(f"/api/v1/public/bookings/{booking['id']}/ics")
    assert ics.status_code == 200
    assert ics.headers["content-type"].startswith("text/calendar")
    assert "DTSTART:20310604T080000Z" in ics.text
    assert "mailto:owner@example.com" in ics.text

    mine = client.get("/api/v1/public/bookings/my-bookings", params={"email": "ola@example.com"}).json()
    assert mine["total"] == 1

    wrong = client.post(f"/api/v1/public/bookings/{booking['id']}/cancel", json={"customer_email": "x@example.com"})
    assert wrong.status_code == 403

    cancelled = client.post(
        f"/api/v1/public/bookings/{booking['id']}/cancel", json={"customer_email": "ola@example.com"}
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["refund_percentage"] == 100
    assert len(availability(client, owner, service).json()["slots"]) == 8


def test_booking_rejections(client, owner):
    import uuid

    service = create_service(client, owner)

    outside = book(client, owner, service, f"{DAY}T18:00:00Z")
    assert outside.status_code == 409
    assert outside.json()["detail"]["reason"] == "outside_business_hours"

    assert book(client, owner, service, f"{DAY}T08:00:00").status_code == 422
    assert book(client, owner, {"id": str(uuid.uuid4())}, f"{DAY}T08:00:00Z").status_code == 404
    assert client.get(f"/api/v1/public/bookings/{uuid.uuid4()}/ics").status_code == 404


def test_blocked_time_closes_all_services(client, owner):
    haircut = create_service(client, owner)
    colour = create_service(client, owner, name="Colour", max_concurrent=3)

    created = client.post(
        "/api/v1/dashboard/blocked-times",
        json={"start_time": f"{DAY}T12:00:00+02:00", "end_time": f"{DAY}T14:00:00+02:00", "reason": "Staff training"},
        headers=owner["headers"],
    )
    assert created.status_code == 201
    block = created.json()

    for service in (haircut, colour):
        starts = [s["start"] for s in availability(client, owner, service).json()["slots"]]
        assert len(starts) == 6
        assert "2031-06-04T10:00:00+00:00" not in starts
        assert "2031-06-04T11:00:00+00:00" not in starts

    rejected = book(client, owner, colour, f"{DAY}T10:30:00Z")
    assert rejected.status_code == 409
    assert rejected.json()["detail"]["reason"] == "provider_blocked"

    listing = client.get("/api/v1/dashboard/blocked-times", headers=owner["headers"]).json()
    assert [b["reason"] for b in listing["blocked_times"]] == ["Staff training"]

    url = f"/api/v1/dashboard/blocked-times/{block['id']}"
    assert client.delete(url, headers=owner["headers"]).status_code == 200
    assert client.delete(url, headers=owner["headers"]).status_code == 404
    assert len(availability(client, owner, haircut).json()["slots"]) == 8


def test_blocked_time_validation(client, owner):
    url = "/api/v1/dashboard/blocked-times"

    naive = {"start_time": f"{DAY}T12:00:00", "end_time": f"{DAY}T14:00:00"}
    backwards = {"start_time": f"{DAY}T14:00:00Z", "end_time": f"{DAY}T12:00:00Z"}

    assert client.post(url, json=naive, headers=owner["headers"]).status_code == 422
    assert client.post(url, json=backwards, headers=owner["headers"]).status_code == 422
    assert client.get(url).status_code in (401, 403)


def test_dashboard_booking_lifecycle(client, owner):
    service = create_service(client, owner)
    booking = book(client, owner, service, f"{DAY}T08:00:00Z", payment_method="VIPPS").json()["booking"]
    assert booking["status"] == "PENDING"

    listing = client.get("/api/v1/dashboard/bookings", params={"start_date": DAY}, headers=owner["headers"]).json()
    assert listing["total_bookings"] == 1

    url = f"/api/v1/dashboard/bookings/{booking['id']}"
    assert client.get(url, headers=owner["headers"]).json()["id"] == booking["id"]

    confirmed = client.patch(f"{url}/status", json={"status": "CONFIRMED"}, headers=owner["headers"])
    assert confirmed.json()["booking"]["status"] == "CONFIRMED"

    back = client.patch(f"{url}/status", json={"status": "PENDING"}, headers=owner["headers"])
    assert back.status_code == 400

    no_show = client.patch(f"{url}/status", json={"status": "NO_SHOW"}, headers=owner["headers"])
    assert no_show.status_code == 200
    # NO_SHOW releases capacity
    assert len(availability(client, owner, service).json()["slots"]) == 8


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/health/detailed").json()["database"] == "healthy"

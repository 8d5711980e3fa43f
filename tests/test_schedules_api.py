import pytest
from httpx import ASGITransport, AsyncClient

import volunteer_scheduler.main as main_module
from volunteer_scheduler.domain.scheduling.service import ScheduleService
from volunteer_scheduler.main import create_app


def _payload(seed, event_id, volunteer_id, **extra):
    body = {"eventId": event_id, "volunteerId": volunteer_id, "createdById": seed.admin_user}
    body.update(extra)
    return body


@pytest.mark.asyncio
async def test_create_schedule_defaults_to_confirmed(client, seed):
    response = await client.post("/schedules", json=_payload(seed, seed.morning, seed.x))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Schedule created successfully"
    assert body["data"]["eventId"] == seed.morning
    assert body["data"]["volunteerId"] == seed.x
    assert body["data"]["status"] == "confirmed"
    assert body["data"]["traineePartnerId"] is None


@pytest.mark.asyncio
async def test_create_schedule_rejects_same_day_clash(client, seed, store):
    first = await client.post("/schedules", json=_payload(seed, seed.morning, seed.x))
    assert first.status_code == 201

    response = await client.post("/schedules", json=_payload(seed, seed.evening, seed.x))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "same day" in body["error"]
    assert "data" not in body


@pytest.mark.asyncio
async def test_create_schedule_accepts_other_day(client, seed):
    await client.post("/schedules", json=_payload(seed, seed.morning, seed.x))

    response = await client.post("/schedules", json=_payload(seed, seed.next_week, seed.x))

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_schedule_rejects_duplicate_pair(client, seed):
    await client.post("/schedules", json=_payload(seed, seed.morning, seed.x))

    response = await client.post("/schedules", json=_payload(seed, seed.morning, seed.x))

    assert response.status_code == 400
    assert response.json()["error"] == "This volunteer is already scheduled for this event"


@pytest.mark.asyncio
async def test_create_schedule_with_trainee_partner(client, seed):
    response = await client.post(
        "/schedules",
        json=_payload(seed, seed.morning, seed.x, traineePartnerId=seed.z, status="pending"),
    )

    assert response.status_code == 201
    assert response.json()["data"]["traineePartnerId"] == seed.z
    assert response.json()["data"]["status"] == "pending"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, expected_error",
    [
        ("eventId", "Event not found"),
        ("volunteerId", "Volunteer not found"),
        ("traineePartnerId", "Trainee partner not found"),
        ("createdById", "Creator user not found"),
    ],
)
async def test_create_schedule_missing_referent(client, seed, field, expected_error):
    body = _payload(seed, seed.morning, seed.x)
    body[field] = 9999

    response = await client.post("/schedules", json=body)

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": expected_error}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"eventId": 0},
        {"volunteerId": -3},
        {"status": "maybe"},
        {"eventId": "abc"},
    ],
)
async def test_create_schedule_invalid_input(client, seed, overrides):
    body = _payload(seed, seed.morning, seed.x)
    body.update(overrides)

    response = await client.post("/schedules", json=body)

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_create_schedule_missing_field(client, seed):
    response = await client.post("/schedules", json={"eventId": seed.morning})

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_get_schedule(client, seed, add_schedule):
    schedule_id = add_schedule(seed.morning, seed.x)

    response = await client.get(f"/schedules/{schedule_id}")

    assert response.status_code == 200
    assert response.json()["data"]["id"] == schedule_id


@pytest.mark.asyncio
async def test_get_schedule_not_found(client, seed):
    response = await client.get("/schedules/9999")

    assert response.status_code == 404
    assert response.json()["error"] == "Schedule not found"


@pytest.mark.asyncio
async def test_malformed_path_id_is_bad_request(client, seed):
    response = await client.get("/schedules/abc")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_schedules(client, seed, add_schedule):
    add_schedule(seed.morning, seed.x)
    add_schedule(seed.morning, seed.y)

    response = await client.get("/schedules")

    assert response.status_code == 200
    assert len(response.json()["data"]) == 2


@pytest.mark.asyncio
async def test_list_schedules_by_event_includes_volunteer_detail(client, seed, add_schedule):
    add_schedule(seed.morning, seed.x)
    add_schedule(seed.morning, seed.z)
    add_schedule(seed.next_week, seed.y)

    response = await client.get(f"/schedules/event/{seed.morning}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [s["userName"] for s in data] == ["Alice", "Carol"]
    assert data[0]["teamName"] == "Worship"
    assert data[0]["roleName"] == "Singer"
    assert data[1]["isTrainee"] is True


@pytest.mark.asyncio
async def test_list_schedules_by_unknown_event(client, seed):
    response = await client.get("/schedules/event/9999")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_schedules_by_volunteer_latest_event_first(client, seed, add_schedule):
    add_schedule(seed.morning, seed.x)
    add_schedule(seed.later, seed.x)
    add_schedule(seed.next_week, seed.x)

    response = await client.get(f"/schedules/volunteer/{seed.x}")

    assert response.status_code == 200
    titles = [s["eventTitle"] for s in response.json()["data"]]
    assert titles == ["Summer Picnic", "Next Sunday", "Sunday Service"]


@pytest.mark.asyncio
async def test_update_schedule_skips_conflict_check(client, seed, add_schedule, store):
    add_schedule(seed.morning, seed.x)
    schedule_id = add_schedule(seed.next_week, seed.x)

    response = await client.put(
        f"/schedules/{schedule_id}",
        json=_payload(seed, seed.evening, seed.x, status="pending"),
    )

    assert response.status_code == 200
    updated = store.schedule(schedule_id)
    assert updated.event_id == seed.evening
    assert updated.status == "pending"


@pytest.mark.asyncio
async def test_update_schedule_rejects_duplicate_pair(client, seed, add_schedule):
    add_schedule(seed.morning, seed.x)
    schedule_id = add_schedule(seed.morning, seed.y)

    response = await client.put(
        f"/schedules/{schedule_id}", json=_payload(seed, seed.morning, seed.x)
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_schedule_not_found(client, seed):
    response = await client.put("/schedules/9999", json=_payload(seed, seed.morning, seed.x))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_schedule(client, seed, add_schedule):
    schedule_id = add_schedule(seed.morning, seed.x)

    response = await client.delete(f"/schedules/{schedule_id}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Schedule deleted successfully"}
    assert (await client.get(f"/schedules/{schedule_id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_schedule_referenced_by_swap_request(
    client, seed, add_schedule, add_swap_request
):
    schedule_id = add_schedule(seed.morning, seed.x)
    add_swap_request(schedule_id)

    response = await client.delete(f"/schedules/{schedule_id}")

    assert response.status_code == 400
    assert (await client.get(f"/schedules/{schedule_id}")).status_code == 200


@pytest.mark.asyncio
async def test_conflict_report(client, seed, add_schedule):
    add_schedule(seed.morning, seed.x)
    add_schedule(seed.evening, seed.x)

    response = await client.get("/conflicts")

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data) == 1
    assert data[0]["volunteerName"] == "Alice"
    assert data[0]["eventCount"] == 2


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"status": "healthy"}}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    [
        "/schedules/99999999999999999999",
        "/schedules/0",
        "/schedules/event/99999999999999999999",
        "/schedules/volunteer/-1",
    ],
)
async def test_out_of_range_path_id_is_bad_request(client, seed, path):
    response = await client.get(path)

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [{"eventId": 2**70}, {"volunteerId": True}])
async def test_create_schedule_rejects_oversized_or_boolean_ids(client, seed, overrides):
    body = _payload(seed, seed.morning, seed.x)
    body.update(overrides)

    response = await client.post("/schedules", json=body)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert (await client.get("/schedules")).json()["data"] == []


@pytest.mark.asyncio
async def test_unexpected_error_uses_envelope(session_factory, seed, monkeypatch):
    def broken(self):
        raise RuntimeError("boom")

    monkeypatch.setattr(ScheduleService, "get_schedules", broken)
    app = create_app(session_factory=session_factory)
    transport = ASGITransport(app=app, raise_app_exceptions=False)

    async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
        response = await raw_client.get("/schedules")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}


def test_importing_main_builds_no_app():
    assert not hasattr(main_module, "app")

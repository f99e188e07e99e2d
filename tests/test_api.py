from datetime import timedelta

import pytest
from bson import ObjectId

from conftest import auth_headers, seed_user, seed_image, seed_report


@pytest.mark.asyncio
async def test_health(api_client):
    response = await api_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["sla_monitor"] == "stopped"


@pytest.mark.asyncio
async def test_report_requires_token(api_client, db):
    target = await seed_user(db, "Target")

    missing = await api_client.post(f"/reports/user/{target}", json={"reason": "spam"})
    assert missing.status_code == 401
    assert missing.json()["success"] is False

    garbage = await api_client.post(
        f"/reports/user/{target}", json={"reason": "spam"}, headers={"Authorization": "Bearer nope"}
    )
    assert garbage.status_code == 401


@pytest.mark.asyncio
async def test_submit_user_report_and_duplicate(api_client, db):
    reporter = await seed_user(db, "Reporter")
    target = await seed_user(db, "Target")
    headers = auth_headers(reporter)

    created = await api_client.post(
        f"/reports/user/{target}", json={"reason": "harassment", "description": "Rude DMs"}, headers=headers
    )
    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    assert body["data"]["status"] == "pending"
    assert ObjectId.is_valid(body["data"]["report_id"])

    duplicate = await api_client.post(f"/reports/user/{target}", json={"reason": "spam"}, headers=headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False
    assert duplicate.json()["error_code"] == "DUPLICATE_REPORT"


@pytest.mark.asyncio
async def test_submit_image_report_errors(api_client, db):
    artist = await seed_user(db, "Artist")
    reporter = await seed_user(db, "Reporter")
    image_id = await seed_image(db, artist)

    own = await api_client.post(f"/reports/image/{image_id}", json={"reason": "spam"}, headers=auth_headers(artist))
    assert own.status_code == 400
    assert own.json()["error_code"] == "SELF_ACTION"

    bad_reason = await api_client.post(
        f"/reports/image/{image_id}", json={"reason": "boring"}, headers=auth_headers(reporter)
    )
    assert bad_reason.status_code == 400

    missing = await api_client.post(
        f"/reports/image/{ObjectId()}", json={"reason": "spam"}, headers=auth_headers(reporter)
    )
    assert missing.status_code == 404

    unknown_field = await api_client.post(
        f"/reports/image/{image_id}", json={"reason": "spam", "priority": "high"}, headers=auth_headers(reporter)
    )
    assert unknown_field.status_code == 400

    too_long = await api_client.post(
        f"/reports/image/{image_id}", json={"reason": "spam", "description": "x" * 1001}, headers=auth_headers(reporter)
    )
    assert too_long.status_code == 400

    accepted = await api_client.post(
        f"/reports/image/{image_id}", json={"reason": "copyright_violation"}, headers=auth_headers(reporter)
    )
    assert accepted.status_code == 201


@pytest.mark.asyncio
async def test_my_reports_and_reasons(api_client, db):
    reporter = await seed_user(db, "Reporter")
    target = await seed_user(db, "Target")
    await seed_report(db, reporter, target)

    mine = await api_client.get("/reports/my-reports", headers=auth_headers(reporter))
    assert mine.status_code == 200
    assert mine.json()["data"]["pagination"]["total"] == 1

    reasons = await api_client.get("/reports/reasons")
    assert reasons.status_code == 200
    assert len(reasons.json()["data"]) == 11


@pytest.mark.asyncio
async def test_admin_routes_reject_regular_users(api_client, db):
    user = await seed_user(db, "User")

    response = await api_client.get("/admin/reports", headers=auth_headers(user))
    assert response.status_code == 403

    anonymous = await api_client.get("/admin/reports/stats")
    assert anonymous.status_code == 401


@pytest.mark.asyncio
async def test_admin_list_detail_and_stats(api_client, db):
    reporter = await seed_user(db, "Reporter")
    target = await seed_user(db, "Target")
    admin = await seed_user(db, "Admin")
    report_id = await seed_report(db, reporter, target, deadline_in=timedelta(hours=2))
    headers = auth_headers(admin, role="admin")

    listing = await api_client.get("/admin/reports", params={"status": "pending", "sla_at_risk": "true"}, headers=headers)
    assert listing.status_code == 200
    reports = listing.json()["data"]["reports"]
    assert [r["id"] for r in reports] == [report_id]
    assert reports[0]["reporter"]["name"] == "Reporter"

    detail = await api_client.get(f"/admin/reports/{report_id}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["data"]["report"]["target_user"]["name"] == "Target"

    not_found = await api_client.get(f"/admin/reports/{ObjectId()}", headers=headers)
    assert not_found.status_code == 404
    invalid = await api_client.get("/admin/reports/not-an-id", headers=headers)
    assert invalid.status_code == 400

    stats = await api_client.get("/admin/reports/stats", headers=headers)
    assert stats.status_code == 200
    assert stats.json()["data"]["by_status"]["pending"] == 1
    assert stats.json()["data"]["sla"]["at_risk"] == 1


@pytest.mark.asyncio
async def test_admin_status_update(api_client, db):
    reporter = await seed_user(db, "Reporter")
    target = await seed_user(db, "Target")
    report_id = await seed_report(db, reporter, target)
    headers = auth_headers(str(ObjectId()), role="admin")

    reviewed = await api_client.patch(f"/admin/reports/{report_id}/status", json={"status": "under_review"}, headers=headers)
    assert reviewed.status_code == 200
    assert reviewed.json()["data"]["status"] == "under_review"

    backwards = await api_client.patch(f"/admin/reports/{report_id}/status", json={"status": "pending"}, headers=headers)
    assert backwards.status_code == 409

    invalid = await api_client.patch(f"/admin/reports/{report_id}/status", json={"status": "closed"}, headers=headers)
    assert invalid.status_code == 400


@pytest.mark.asyncio
async def test_admin_actions(api_client, db):
    reporter = await seed_user(db, "Reporter")
    target = await seed_user(db, "Target")
    warn_report = await seed_report(db, reporter, target)
    ban_report = await seed_report(db, reporter, target, reason="scam_fraud")
    headers = auth_headers(str(ObjectId()), role="admin")

    warned = await api_client.post(f"/admin/reports/{warn_report}/action/warn-user", headers=headers)
    assert warned.status_code == 200
    assert warned.json()["data"]["warning_count"] == 1
    assert warned.json()["data"]["replayed"] is False

    replayed = await api_client.post(f"/admin/reports/{warn_report}/action/warn-user", json={}, headers=headers)
    assert replayed.status_code == 200
    assert replayed.json()["data"]["replayed"] is True

    conflict = await api_client.post(f"/admin/reports/{warn_report}/action/dismiss", headers=headers)
    assert conflict.status_code == 409

    no_reason = await api_client.post(f"/admin/reports/{ban_report}/action/ban-user", json={}, headers=headers)
    assert no_reason.status_code == 400

    bad_duration = await api_client.post(
        f"/admin/reports/{ban_report}/action/suspend-user", json={"duration_days": 0}, headers=headers
    )
    assert bad_duration.status_code == 400

    banned = await api_client.post(
        f"/admin/reports/{ban_report}/action/ban-user", json={"reason": "Fake listings"}, headers=headers
    )
    assert banned.status_code == 200
    assert banned.json()["data"]["moderation_status"] == "banned"


@pytest.mark.asyncio
async def test_admin_remove_content_and_dismiss(api_client, db):
    reporter = await seed_user(db, "Reporter")
    artist = await seed_user(db, "Artist")
    image_id = await seed_image(db, artist)
    image_report = await seed_report(db, reporter, artist, target_image_id=image_id)
    user_report = await seed_report(db, reporter, artist)
    headers = auth_headers(str(ObjectId()), role="admin")

    wrong_target = await api_client.post(f"/admin/reports/{user_report}/action/remove-content", headers=headers)
    assert wrong_target.status_code == 400

    removed = await api_client.post(
        f"/admin/reports/{image_report}/action/remove-content", json={"notify_user": False}, headers=headers
    )
    assert removed.status_code == 200
    assert removed.json()["data"]["removed_image_id"] == image_id
    assert await db["images"].find_one({"_id": ObjectId(image_id)}) is None

    dismissed = await api_client.post(
        f"/admin/reports/{user_report}/action/dismiss", json={"reason": "No violation"}, headers=headers
    )
    assert dismissed.status_code == 200
    assert dismissed.json()["data"]["status"] == "dismissed"


@pytest.mark.asyncio
async def test_manual_sla_check(api_client, db):
    reporter = await seed_user(db, "Reporter")
    target = await seed_user(db, "Target")
    await seed_report(db, reporter, target, deadline_in=timedelta(minutes=20))
    await seed_report(db, reporter, target, deadline_in=timedelta(hours=-2))
    headers = auth_headers(str(ObjectId()), role="admin")

    first = await api_client.post("/admin/reports/sla/check", headers=headers)
    assert first.status_code == 200
    assert first.json()["data"]["urgent"] == 1
    assert first.json()["data"]["alerts_sent"] == 1
    assert first.json()["data"]["breached_marked"] == 1

    second = await api_client.post("/admin/reports/sla/check", headers=headers)
    assert second.json()["data"]["alerts_sent"] == 0


@pytest.mark.asyncio
async def test_block_endpoints(api_client, db):
    alice = await seed_user(db, "Alice")
    bob = await seed_user(db, "Bob")
    headers = auth_headers(alice)

    created = await api_client.post(f"/blocks/{bob}", json={"reason": "spam DMs"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["data"]["blocked_user_id"] == bob
    assert "Bob" in created.json()["message"]

    again = await api_client.post(f"/blocks/{bob}", headers=headers)
    assert again.status_code == 409

    self_block = await api_client.post(f"/blocks/{alice}", headers=headers)
    assert self_block.status_code == 400

    check = await api_client.get(f"/blocks/check/{bob}", headers=headers)
    assert check.json()["data"] == {"is_blocked": True, "is_blocked_by": False, "any_block": True}

    reverse = await api_client.get(f"/blocks/check/{alice}", headers=auth_headers(bob))
    assert reverse.json()["data"] == {"is_blocked": False, "is_blocked_by": True, "any_block": True}

    listing = await api_client.get("/blocks", headers=headers)
    assert listing.status_code == 200
    assert listing.json()["data"]["blocked_users"][0]["name"] == "Bob"

    ids = await api_client.get("/blocks/ids", headers=headers)
    assert ids.json()["data"] == [bob]

    removed = await api_client.delete(f"/blocks/{bob}", headers=headers)
    assert removed.status_code == 200
    missing = await api_client.delete(f"/blocks/{bob}", headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_image_listing_respects_blocks(api_client, db):
    viewer = await seed_user(db, "Viewer")
    blocked_artist = await seed_user(db, "Blocked")
    other_artist = await seed_user(db, "Other")
    hidden = await seed_image(db, blocked_artist, name="Hidden")
    visible = await seed_image(db, other_artist, name="Visible")

    await api_client.post(f"/blocks/{blocked_artist}", headers=auth_headers(viewer))

    as_viewer = await api_client.get("/images", headers=auth_headers(viewer))
    assert as_viewer.status_code == 200
    assert [img["id"] for img in as_viewer.json()["data"]["images"]] == [visible]

    anonymous = await api_client.get("/images")
    assert {img["id"] for img in anonymous.json()["data"]["images"]} == {hidden, visible}

    bad_category = await api_client.get("/images", params={"category": "cars"})
    assert bad_category.status_code == 400

from datetime import timedelta

import pytest
import pytest_asyncio

from common.exceptions.base_exception import ValidationException, ConflictException, ServiceUnavailableException
from common.utils.date_utils import utc_now
from domain.moderation.services.moderation_service import (
    ModerationService, ALREADY_REMOVED_NOTES, DEFAULT_DISMISS_NOTES
)
from domain.notification.services.notification_service import NotificationService, build_notification_email_html
from domain.reports.entities.report_entity import ResolutionAction
from conftest import RecordingEmailClient, RecordingStorage, seed_user, seed_image, seed_report


class FailingNotifications:
    async def send(self, *args, **kwargs):
        raise RuntimeError("notification backend down")


def build_service(db, email_outbox, storage):
    return ModerationService(db, notification_service=NotificationService(db, email_client=email_outbox), storage=storage)


async def notifications_for(db, user_id):
    return await db["notifications"].find({"recipient_user_id": user_id}).to_list(length=None)


@pytest_asyncio.fixture
async def people(db):
    return {
        "reporter": await seed_user(db, "Reporter"),
        "target": await seed_user(db, "Target"),
    }


@pytest.mark.asyncio
async def test_warn_user_closes_report_and_notifies_both_sides(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    result = await service.warn_user(report_id, "admin-1", "Please keep it civil")

    assert result["data"]["warning_count"] == 1
    assert result["data"]["moderation_status"] == "warned"
    assert result["data"]["replayed"] is False

    report = await service.reports.get(report_id)
    assert report["status"] == "resolved"
    assert report["resolution_action"] == "warning_issued"
    assert report["resolution_notes"] == "Please keep it civil"
    assert report["resolved_by_admin_id"] == "admin-1"

    target_notes = await notifications_for(db, people["target"])
    assert [n["type"] for n in target_notes] == ["moderation_warning"]
    assert target_notes[0]["message"] == "Please keep it civil"
    reporter_notes = await notifications_for(db, people["reporter"])
    assert [n["type"] for n in reporter_notes] == ["report_resolved"]
    assert len(email_outbox.sent) == 2


@pytest.mark.asyncio
async def test_repeating_an_action_is_a_replay(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    await service.warn_user(report_id, "admin-1")
    again = await service.warn_user(report_id, "admin-2")

    assert again["data"]["replayed"] is True
    assert again["data"]["warning_count"] == 1
    assert len(await notifications_for(db, people["target"])) == 1

    report = await service.reports.get(report_id)
    assert report["resolved_by_admin_id"] == "admin-1"


def fail_first_user_write(service, monkeypatch):
    original = service.users.apply_moderation
    calls = {"count": 0}

    async def flaky(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise ServiceUnavailableException()
        return await original(*args, **kwargs)

    monkeypatch.setattr(service.users, "apply_moderation", flaky)
    return calls


@pytest.mark.asyncio
async def test_warn_retry_finishes_user_write_after_failure(db, email_outbox, storage, people, monkeypatch):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)
    fail_first_user_write(service, monkeypatch)

    with pytest.raises(ServiceUnavailableException):
        await service.warn_user(report_id, "admin-1", "Please keep it civil")

    report = await service.reports.get(report_id)
    assert report["status"] == "resolved"
    assert (await service.users.get(people["target"])).get("warning_count", 0) == 0
    assert await notifications_for(db, people["target"]) == []

    retried = await service.warn_user(report_id, "admin-1", "Please keep it civil")

    assert retried["data"]["replayed"] is True
    assert retried["data"]["warning_count"] == 1
    assert (await service.users.get(people["target"]))["warning_count"] == 1
    assert [n["type"] for n in await notifications_for(db, people["target"])] == ["moderation_warning"]
    assert [n["type"] for n in await notifications_for(db, people["reporter"])] == ["report_resolved"]

    # once the user write has landed, further retries change nothing
    again = await service.warn_user(report_id, "admin-1")
    assert again["data"]["warning_count"] == 1
    assert len(await notifications_for(db, people["target"])) == 1


@pytest.mark.asyncio
async def test_ban_retry_finishes_user_write_after_failure(db, email_outbox, storage, people, monkeypatch):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)
    calls = fail_first_user_write(service, monkeypatch)

    with pytest.raises(ServiceUnavailableException):
        await service.ban_user(report_id, "admin-1", "Repeated fraud")
    assert (await service.users.get(people["target"])).get("moderation_status") != "banned"

    retried = await service.ban_user(report_id, "admin-1", "Repeated fraud")

    assert calls["count"] == 2
    assert retried["data"]["replayed"] is True
    assert (await service.users.get(people["target"]))["moderation_status"] == "banned"
    assert [n["type"] for n in await notifications_for(db, people["target"])] == ["moderation_ban"]


@pytest.mark.asyncio
async def test_warnings_from_separate_reports_accumulate(db, email_outbox, storage, people):
    first = await seed_report(db, people["reporter"], people["target"])
    second = await seed_report(db, people["reporter"], people["target"], reason="harassment")
    service = build_service(db, email_outbox, storage)

    await service.warn_user(first, "admin-1")
    result = await service.warn_user(second, "admin-1")

    assert result["data"]["replayed"] is False
    assert result["data"]["warning_count"] == 2


@pytest.mark.asyncio
async def test_warning_email_escapes_admin_message(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    await service.warn_user(report_id, "admin-1", "<b>civil</b> & polite")

    warning_mail = email_outbox.sent[0]
    assert "&lt;b&gt;civil&lt;/b&gt; &amp; polite" in warning_mail["body"]
    assert "<b>civil</b>" not in warning_mail["body"]


def test_notification_email_escapes_user_text():
    body = build_notification_email_html("Artmart", '<img src=x onerror="alert(1)">', "<script>t</script>", "a < b")

    assert "<script>" not in body
    assert "&lt;script&gt;t&lt;/script&gt;" in body
    assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in body
    assert "a &lt; b" in body


@pytest.mark.asyncio
async def test_different_action_on_closed_report_conflicts(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    await service.warn_user(report_id, "admin-1")

    with pytest.raises(ConflictException):
        await service.dismiss(report_id, "admin-1")
    with pytest.raises(ConflictException):
        await service.ban_user(report_id, "admin-1", "fraud")


@pytest.mark.asyncio
async def test_status_guard_rejects_stale_settle(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)
    stale = await service.reports.get(report_id)

    await service.dismiss(report_id, "admin-1")

    assert await service._settle(stale, "admin-2", ResolutionAction.NO_ACTION, "late", "en") is None
    with pytest.raises(ConflictException):
        await service._settle(stale, "admin-2", ResolutionAction.WARNING_ISSUED, "late", "en")

    report = await service.reports.get(report_id)
    assert report["resolved_by_admin_id"] == "admin-1"
    assert report["resolution_notes"] == DEFAULT_DISMISS_NOTES


@pytest.mark.asyncio
async def test_suspend_user_validates_duration(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    with pytest.raises(ValidationException):
        await service.suspend_user(report_id, "admin-1", duration_days=0)
    with pytest.raises(ValidationException):
        await service.suspend_user(report_id, "admin-1", duration_days=366)

    before = utc_now()
    result = await service.suspend_user(report_id, "admin-1")

    assert result["data"]["moderation_status"] == "suspended"
    until = result["data"]["suspended_until"]
    assert timedelta(days=7) - timedelta(seconds=1) <= until - before <= timedelta(days=7, minutes=1)

    report = await service.reports.get(report_id)
    assert report["resolution_action"] == "user_suspended"
    assert report["resolution_notes"] == "User suspended for 7 days due to community guideline violations"
    target_notes = await notifications_for(db, people["target"])
    assert [n["type"] for n in target_notes] == ["moderation_suspension"]


@pytest.mark.asyncio
async def test_ban_user_requires_reason(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    with pytest.raises(ValidationException):
        await service.ban_user(report_id, "admin-1", None)
    with pytest.raises(ValidationException):
        await service.ban_user(report_id, "admin-1", "   ")

    result = await service.ban_user(report_id, "admin-1", "Repeated fraud")

    assert result["data"]["moderation_status"] == "banned"
    assert result["data"]["ban_reason"] == "Repeated fraud"
    user = await service.users.get(people["target"])
    assert user["moderation_status"] == "banned"


@pytest.mark.asyncio
async def test_remove_content_deletes_image_and_asset(db, email_outbox, storage, people):
    image_id = await seed_image(db, people["target"], name="Sunset")
    image = await db["images"].find_one({})
    report_id = await seed_report(
        db, people["reporter"], people["target"], target_image_id=image_id,
        content_snapshot={"image_name": "Sunset", "image_link": image["image_link"]}
    )
    service = build_service(db, email_outbox, storage)

    result = await service.remove_content(report_id, "admin-1")

    assert result["data"] == {"removed_image_id": image_id, "image_name": "Sunset", "replayed": False}
    assert storage.deleted == [image["image_link"]]
    assert await service.images.get(image_id) is None

    report = await service.reports.get(report_id)
    assert report["status"] == "resolved"
    assert report["resolution_action"] == "content_removed"
    assert [n["type"] for n in await notifications_for(db, people["target"])] == ["content_removed"]
    assert [n["type"] for n in await notifications_for(db, people["reporter"])] == ["report_resolved"]

    again = await service.remove_content(report_id, "admin-1")
    assert again["data"]["replayed"] is True
    assert len(storage.deleted) == 1


@pytest.mark.asyncio
async def test_remove_content_without_owner_notification(db, email_outbox, storage, people):
    image_id = await seed_image(db, people["target"])
    report_id = await seed_report(db, people["reporter"], people["target"], target_image_id=image_id)
    service = build_service(db, email_outbox, storage)

    await service.remove_content(report_id, "admin-1", notify_target=False)

    assert await notifications_for(db, people["target"]) == []
    assert len(await notifications_for(db, people["reporter"])) == 1


@pytest.mark.asyncio
async def test_remove_content_when_image_already_gone(db, email_outbox, storage, people):
    image_id = await seed_image(db, people["target"])
    report_id = await seed_report(db, people["reporter"], people["target"], target_image_id=image_id)
    service = build_service(db, email_outbox, storage)
    await service.images.delete(image_id)

    result = await service.remove_content(report_id, "admin-1")

    assert result["data"]["replayed"] is False
    assert storage.deleted == []
    report = await service.reports.get(report_id)
    assert report["status"] == "resolved"
    assert report["resolution_notes"] == ALREADY_REMOVED_NOTES


@pytest.mark.asyncio
async def test_remove_content_needs_an_image_report(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    with pytest.raises(ValidationException):
        await service.remove_content(report_id, "admin-1")


@pytest.mark.asyncio
async def test_storage_failure_does_not_block_removal(db, email_outbox, people):
    image_id = await seed_image(db, people["target"])
    report_id = await seed_report(db, people["reporter"], people["target"], target_image_id=image_id)
    service = build_service(db, email_outbox, RecordingStorage(fail=True))

    result = await service.remove_content(report_id, "admin-1")

    assert result["data"]["replayed"] is False
    assert await service.images.get(image_id) is None
    assert (await service.reports.get(report_id))["status"] == "resolved"


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_the_action(db, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = ModerationService(db, notification_service=FailingNotifications(), storage=storage)

    result = await service.ban_user(report_id, "admin-1", "spam ring")

    assert result["data"]["moderation_status"] == "banned"
    assert (await service.reports.get(report_id))["status"] == "resolved"


@pytest.mark.asyncio
async def test_email_failure_keeps_in_app_notification(db, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, RecordingEmailClient(fail=True), storage)

    await service.warn_user(report_id, "admin-1")

    assert len(await notifications_for(db, people["target"])) == 1


@pytest.mark.asyncio
async def test_dismiss_and_replay(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    result = await service.dismiss(report_id, "admin-1", "Not a violation")

    assert result["data"]["status"] == "dismissed"
    assert result["data"]["resolution_action"] == "no_action"
    assert result["data"]["resolution_notes"] == "Not a violation"
    assert result["data"]["replayed"] is False

    again = await service.dismiss(report_id, "admin-2")
    assert again["data"]["replayed"] is True
    assert again["data"]["resolved_by_admin_id"] == "admin-1"

    assert [n["type"] for n in await notifications_for(db, people["reporter"])] == ["report_resolved"]
    assert await notifications_for(db, people["target"]) == []


@pytest.mark.asyncio
async def test_notes_length_is_bounded(db, email_outbox, storage, people):
    report_id = await seed_report(db, people["reporter"], people["target"])
    service = build_service(db, email_outbox, storage)

    with pytest.raises(ValidationException):
        await service.warn_user(report_id, "admin-1", "x" * 2001)
    assert (await service.reports.get(report_id))["status"] == "pending"

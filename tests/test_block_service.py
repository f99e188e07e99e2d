import pytest
from bson import ObjectId

from common.exceptions.base_exception import ValidationException, NotFoundException, ConflictException, SelfActionException
from domain.blocks.services.block_service import BlockService
from domain.images.services.image_listing_service import ImageListingService
from conftest import seed_user, seed_image


@pytest.mark.asyncio
async def test_block_is_directional(db):
    alice = await seed_user(db, "Alice")
    bob = await seed_user(db, "Bob")
    service = BlockService(db)

    result = await service.block(alice, bob, reason="rude comments")

    assert result["blocked_user_id"] == bob
    assert result["name"] == "Bob"
    assert await service.is_blocked(alice, bob) is True
    assert await service.is_blocked(bob, alice) is False

    status = await service.mutual_status(alice, bob)
    assert status.a_blocked_b is True
    assert status.b_blocked_a is False
    assert status.any_block is True

    reverse = await service.mutual_status(bob, alice)
    assert reverse.a_blocked_b is False
    assert reverse.b_blocked_a is True


@pytest.mark.asyncio
async def test_block_rejects_self_unknown_and_duplicate(db):
    alice = await seed_user(db, "Alice")
    bob = await seed_user(db, "Bob")
    service = BlockService(db)

    with pytest.raises(SelfActionException):
        await service.block(alice, alice)

    with pytest.raises(ValidationException):
        await service.block(alice, "not-an-id")

    with pytest.raises(NotFoundException):
        await service.block(alice, str(ObjectId()))

    await service.block(alice, bob)
    with pytest.raises(ConflictException) as exc_info:
        await service.block(alice, bob)
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_unblock_removes_only_that_edge(db):
    alice = await seed_user(db, "Alice")
    bob = await seed_user(db, "Bob")
    service = BlockService(db)

    await service.block(alice, bob)
    await service.block(bob, alice)

    result = await service.unblock(alice, bob)

    assert result == {"unblocked_user_id": bob}
    assert await service.is_blocked(alice, bob) is False
    assert await service.is_blocked(bob, alice) is True

    with pytest.raises(NotFoundException):
        await service.unblock(alice, bob)


@pytest.mark.asyncio
async def test_blocked_ids_are_one_directional(db):
    alice = await seed_user(db, "Alice")
    bob = await seed_user(db, "Bob")
    carol = await seed_user(db, "Carol")
    service = BlockService(db)

    await service.block(alice, bob)
    await service.block(alice, carol)
    await service.block(carol, bob)

    assert sorted(await service.blocked_ids_of(alice)) == sorted([bob, carol])
    assert await service.blocked_ids_of(bob) == []
    assert await service.blocked_ids_of(carol) == [bob]


@pytest.mark.asyncio
async def test_list_blocked_returns_names_and_pagination(db):
    alice = await seed_user(db, "Alice")
    bob = await seed_user(db, "Bob")
    carol = await seed_user(db, "Carol")
    service = BlockService(db)

    await service.block(alice, bob)
    await service.block(alice, carol)

    result = await service.list_blocked(alice, page="1", limit="500")

    assert result["pagination"]["total"] == 2
    assert result["pagination"]["limit"] == 100
    names = {entry["name"] for entry in result["blocked_users"]}
    assert names == {"Bob", "Carol"}
    assert all(entry["blocked_at"].tzinfo is not None for entry in result["blocked_users"])


@pytest.mark.asyncio
async def test_listing_hides_blocked_authors_for_the_blocker_only(db):
    viewer = await seed_user(db, "Viewer")
    blocked_artist = await seed_user(db, "Blocked Artist")
    other_artist = await seed_user(db, "Other Artist")
    hidden = await seed_image(db, blocked_artist, name="Hidden")
    visible = await seed_image(db, other_artist, name="Visible")
    viewer_image = await seed_image(db, viewer, name="Mine")

    await BlockService(db).block(viewer, blocked_artist)
    listing = ImageListingService(db)

    seen_by_viewer = {img["id"] for img in (await listing.list_images(viewer))["images"]}
    assert hidden not in seen_by_viewer
    assert visible in seen_by_viewer

    seen_anonymously = {img["id"] for img in (await listing.list_images(None))["images"]}
    assert {hidden, visible, viewer_image} <= seen_anonymously

    # the blocked artist is not filtered in the other direction
    seen_by_blocked = {img["id"] for img in (await listing.list_images(blocked_artist))["images"]}
    assert viewer_image in seen_by_blocked


@pytest.mark.asyncio
async def test_listing_filters_by_category(db):
    artist = await seed_user(db, "Artist")
    photo = await seed_image(db, artist, name="Photo", category="photography")
    await seed_image(db, artist, name="Canvas", category="paintings")
    listing = ImageListingService(db)

    result = await listing.list_images(None, category="photography")

    assert [img["id"] for img in result["images"]] == [photo]
    assert result["pagination"]["total"] == 1

    with pytest.raises(ValidationException):
        await listing.list_images(None, category="furniture")

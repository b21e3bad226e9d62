import pytest
from unittest.mock import AsyncMock
from app.services.swipe_service import SwipeService
from app.models.swipe import Swipe
from app.models.match import Match
from app.core.exceptions import ValidationError, DuplicateActionError, NotFoundError


def _swipe(swiper, target, action="like", target_type="developer"):
    return Swipe(swiper_id=swiper, target_id=target, target_type=target_type, action=action)


@pytest.mark.asyncio
@pytest.mark.parametrize("target_type,action", [
    ("developer", "love"),
    ("company", "like"),
])
async def test_record_swipe_rejects_invalid_enums(mock_session, target_type, action):
    service = SwipeService(mock_session)
    with pytest.raises(ValidationError):
        await service.record_swipe("alice", "bob", target_type, action)
    mock_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_record_swipe_rejects_self_swipe(mock_session):
    service = SwipeService(mock_session)
    with pytest.raises(ValidationError):
        await service.record_swipe("alice", "alice", "developer", "like")
    mock_session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_record_swipe_unknown_developer(mock_session, make_result):
    mock_session.execute.side_effect = [make_result(scalar=None)]
    service = SwipeService(mock_session)
    with pytest.raises(NotFoundError):
        await service.record_swipe("alice", "ghost", "developer", "like")
    mock_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_record_swipe_duplicate_is_rejected(mock_session, make_result, bob):
    first = _swipe("alice", "bob", action="pass")
    mock_session.execute.side_effect = [
        make_result(scalar=bob),    # target exists
        make_result(scalar=first),  # already swiped
    ]
    service = SwipeService(mock_session)

    with pytest.raises(DuplicateActionError):
        await service.record_swipe("alice", "bob", "developer", "like")

    # The original swipe is never touched
    mock_session.add.assert_not_called()
    mock_session.commit.assert_not_called()
    assert first.action == "pass"


@pytest.mark.asyncio
async def test_record_swipe_concurrent_duplicate_hits_unique_constraint(mock_session, make_result, bob, integrity_error):
    mock_session.execute.side_effect = [make_result(scalar=bob), make_result(scalar=None)]
    mock_session.commit.side_effect = integrity_error
    service = SwipeService(mock_session)

    with pytest.raises(DuplicateActionError):
        await service.record_swipe("alice", "bob", "developer", "like")
    mock_session.rollback.assert_called_once()


@pytest.mark.asyncio
async def test_one_sided_like_creates_no_match(mock_session, make_result, bob):
    mock_session.execute.side_effect = [
        make_result(scalar=bob),
        make_result(scalar=None),  # no previous swipe
        make_result(scalar=None),  # no reciprocal swipe
    ]
    service = SwipeService(mock_session)
    service.match_service.create_match = AsyncMock()

    result = await service.record_swipe("alice", "bob", "developer", "like")

    assert result.match is None
    assert result.swipe.swiper_id == "alice"
    assert result.swipe.target_id == "bob"
    assert result.swipe.action == "like"
    mock_session.add.assert_called_once_with(result.swipe)
    service.match_service.create_match.assert_not_called()


@pytest.mark.asyncio
async def test_reciprocal_like_creates_match(mock_session, make_result, alice):
    created = Match(id=11, user1_id="bob", user2_id="alice", is_active=True)
    mock_session.execute.side_effect = [
        make_result(scalar=alice),
        make_result(scalar=None),
        make_result(scalar=_swipe("alice", "bob", action="like")),
    ]
    service = SwipeService(mock_session)
    service.match_service.create_match = AsyncMock(return_value=created)

    result = await service.record_swipe("bob", "alice", "developer", "like")

    assert result.match is created
    service.match_service.create_match.assert_awaited_once_with("bob", "alice")


@pytest.mark.asyncio
async def test_super_like_counts_as_positive_on_both_sides(mock_session, make_result, alice):
    mock_session.execute.side_effect = [
        make_result(scalar=alice),
        make_result(scalar=None),
        make_result(scalar=_swipe("alice", "bob", action="super_like")),
    ]
    service = SwipeService(mock_session)
    service.match_service.create_match = AsyncMock(return_value=Match(id=3))

    result = await service.record_swipe("bob", "alice", "developer", "super_like")

    assert result.match is not None


@pytest.mark.asyncio
async def test_like_answered_by_pass_creates_no_match(mock_session, make_result, alice):
    mock_session.execute.side_effect = [
        make_result(scalar=alice),
        make_result(scalar=None),
        make_result(scalar=_swipe("alice", "bob", action="like")),
    ]
    service = SwipeService(mock_session)
    service.match_service.create_match = AsyncMock()

    result = await service.record_swipe("bob", "alice", "developer", "pass")

    assert result.match is None
    # A pass never triggers the reciprocal lookup
    assert mock_session.execute.await_count == 2
    service.match_service.create_match.assert_not_called()


@pytest.mark.asyncio
async def test_like_on_earlier_pass_creates_no_match(mock_session, make_result, alice):
    mock_session.execute.side_effect = [
        make_result(scalar=alice),
        make_result(scalar=None),
        make_result(scalar=_swipe("alice", "bob", action="pass")),
    ]
    service = SwipeService(mock_session)
    service.match_service.create_match = AsyncMock()

    result = await service.record_swipe("bob", "alice", "developer", "like")

    assert result.match is None
    service.match_service.create_match.assert_not_called()


@pytest.mark.asyncio
async def test_tool_like_never_matches(mock_session, make_result):
    mock_session.execute.side_effect = [make_result(scalar=None)]
    service = SwipeService(mock_session)
    service.match_service.create_match = AsyncMock()

    result = await service.record_swipe("alice", "tool-42", "tool", "like")

    assert result.match is None
    assert result.swipe.target_type == "tool"
    # Only the duplicate check ran: no target lookup, no reciprocity lookup
    assert mock_session.execute.await_count == 1


@pytest.mark.asyncio
async def test_list_swiped_target_ids(mock_session, make_result):
    mock_session.execute.return_value = make_result(items=["bob", "carol"])
    service = SwipeService(mock_session)

    assert await service.list_swiped_target_ids("alice", "developer") == ["bob", "carol"]

    with pytest.raises(ValidationError):
        await service.list_swiped_target_ids("alice", "company")

import pytest
from sqlalchemy import func, select

from models.match import Match, MatchStatus
from services.match_repository import MatchRepository, PairAlreadyExists


async def test_find_by_pair_ignores_argument_order(session, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    repo = MatchRepository(session)
    created = await repo.create(alice.id, bob.id, MatchStatus.LIKE)

    assert (await repo.find_by_pair(alice.id, bob.id)).id == created.id
    assert (await repo.find_by_pair(bob.id, alice.id)).id == created.id


async def test_find_by_pair_returns_none_without_record(session, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    assert await MatchRepository(session).find_by_pair(alice.id, bob.id) is None


async def test_create_sets_initiator_as_user_a(session, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")

    match = await MatchRepository(session).create(bob.id, alice.id, MatchStatus.PASS)

    assert match.user_a_id == bob.id
    assert match.user_b_id == alice.id
    assert match.user_a_to_b_status == MatchStatus.PASS
    assert match.user_b_to_a_status == MatchStatus.PENDING
    assert (match.pair_low, match.pair_high) == tuple(sorted([alice.id, bob.id]))


async def test_second_row_for_same_pair_is_rejected(session, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    repo = MatchRepository(session)
    await repo.create(alice.id, bob.id, MatchStatus.LIKE)

    with pytest.raises(PairAlreadyExists):
        await repo.create(bob.id, alice.id, MatchStatus.LIKE)

    # session is usable again after the rollback
    count = await session.scalar(select(func.count(Match.id)))
    assert count == 1


async def test_set_status_does_not_clobber_other_slot(session_factory, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    async with session_factory() as setup:
        await MatchRepository(setup).create(alice.id, bob.id, MatchStatus.PASS)

    # both parties read the row before either writes
    async with session_factory() as first, session_factory() as second:
        first_repo, second_repo = MatchRepository(first), MatchRepository(second)
        seen_by_alice = await first_repo.find_by_pair(alice.id, bob.id)
        seen_by_bob = await second_repo.find_by_pair(bob.id, alice.id)

        await first_repo.set_status(seen_by_alice, alice.id, MatchStatus.LIKE)
        await second_repo.set_status(seen_by_bob, bob.id, MatchStatus.LIKE)

    async with session_factory() as check:
        match = await MatchRepository(check).find_by_pair(alice.id, bob.id)
        assert match.user_a_to_b_status == MatchStatus.LIKE
        assert match.user_b_to_a_status == MatchStatus.LIKE
        assert match.is_mutual_like


async def test_list_mutual_likes_filters_and_orders(session, make_user):
    alice = await make_user("Alice")
    bob, carol, dave, erin = [await make_user(n) for n in ("Bob", "Carol", "Dave", "Erin")]
    repo = MatchRepository(session)

    for other in (carol, bob, dave):
        match = await repo.create(other.id, alice.id, MatchStatus.LIKE)
        if other is not dave:
            await repo.set_status(match, alice.id, MatchStatus.LIKE)
    unrelated = await repo.create(bob.id, erin.id, MatchStatus.LIKE)
    await repo.set_status(unrelated, erin.id, MatchStatus.LIKE)

    mutual = await repo.list_mutual_likes(alice.id)

    assert [m.other_user_id(alice.id) for m in mutual] == [carol.id, bob.id]

"""
Matching tests: browse filters and pagination, match details, and the
recommended / top-rated rankings.
"""

from datetime import datetime
from types import SimpleNamespace

import pytest

from app.models.exchange import ExchangeStatus, SkillExchange
from app.models.review import Review
from app.models.skill import Skill, UserSkill
from app.models.user import User
from app.services import matching_service
from app.services.presence_service import UserPresenceService


def _create_user(db, name: str, credits: int = 5) -> User:
    user = User(
        name=name,
        email=f"{name.lower()}@test.com",
        password_hash="hash",
        time_credits=credits,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _create_skill(db, name: str, category: str) -> Skill:
    skill = Skill(name=name, category=category, description=f"All about {name}")
    db.add(skill)
    db.commit()
    db.refresh(skill)
    return skill


def _link(db, user, skill, is_offering: bool = True, level: int = 3) -> UserSkill:
    link = UserSkill(
        user_id=user.id,
        skill_id=skill.id,
        is_offering=is_offering,
        proficiency_level=level,
    )
    db.add(link)
    db.commit()
    return link


def _review(db, reviewer, reviewed, skill, rating: int) -> Review:
    exchange = SkillExchange(
        offerer_id=reviewed.id,
        learner_id=reviewer.id,
        skill_id=skill.id,
        scheduled_at=datetime(2025, 1, 1, 10, 0),
        duration=1.0,
        status=ExchangeStatus.COMPLETED,
    )
    db.add(exchange)
    db.flush()
    review = Review(
        exchange_id=exchange.id,
        reviewer_id=reviewer.id,
        reviewed_user_id=reviewed.id,
        rating=rating,
    )
    db.add(review)
    db.commit()
    return review


@pytest.fixture
def community(db_session):
    """
    me     - wants to learn Python
    alice  - offers Python (avg 5.0, 1 review)
    bob    - offers Guitar (avg 3.0, 2 reviews)
    carol  - no skills (avg 4.0, 2 reviews)
    dave   - wants to learn Python (does not offer it)
    """
    db = db_session
    python = _create_skill(db, "Python", "Programming")
    guitar = _create_skill(db, "Guitar", "Music")

    me = _create_user(db, "Me")
    alice = _create_user(db, "Alice")
    bob = _create_user(db, "Bob")
    carol = _create_user(db, "Carol")
    dave = _create_user(db, "Dave")

    _link(db, me, python, is_offering=False)
    _link(db, alice, python, is_offering=True, level=5)
    _link(db, bob, guitar, is_offering=True)
    _link(db, dave, python, is_offering=False)

    _review(db, me, alice, python, 5)
    _review(db, me, bob, guitar, 2)
    _review(db, dave, bob, guitar, 4)
    _review(db, me, carol, python, 5)
    _review(db, dave, carol, python, 3)

    return SimpleNamespace(
        me=me, alice=alice, bob=bob, carol=carol, dave=dave,
        python=python, guitar=guitar, presence=UserPresenceService(),
    )


def _names(matches):
    return [m.name for m in matches]


# ======================
# AVERAGE RATING
# ======================

def test_average_rating_of_no_reviews_is_zero():
    assert matching_service.average_rating([]) == 0.0


def test_average_rating_is_arithmetic_mean():
    reviews = [SimpleNamespace(rating=r) for r in (4, 5, 3)]
    assert matching_service.average_rating(reviews) == pytest.approx(4.0)


# ======================
# BROWSE
# ======================

def test_browse_excludes_current_user_and_orders_by_name(db_session, community):
    result = matching_service.browse_users(
        db_session, community.me.id, presence=community.presence
    )

    assert _names(result.items) == ["Alice", "Bob", "Carol", "Dave"]
    assert result.total_count == 4
    assert result.page == 1
    assert result.total_pages == 1


def test_browse_aggregates_rating_and_offered_skills(db_session, community):
    result = matching_service.browse_users(
        db_session, community.me.id, presence=community.presence
    )
    bob = next(m for m in result.items if m.name == "Bob")

    assert bob.rating == pytest.approx(3.0)
    assert bob.review_count == 2
    assert [s.skill.name for s in bob.skills] == ["Guitar"]

    dave = next(m for m in result.items if m.name == "Dave")
    assert dave.skills == []
    assert dave.rating == 0.0


def test_browse_category_filter_is_case_insensitive_and_offering_only(db_session, community):
    result = matching_service.browse_users(
        db_session, community.me.id, category="programming", presence=community.presence
    )

    # Dave only wants to learn Python, so he is not a Programming match
    assert _names(result.items) == ["Alice"]
    assert result.total_count == 1


def test_browse_skill_name_substring(db_session, community):
    result = matching_service.browse_users(
        db_session, community.me.id, skill_name="UITA", presence=community.presence
    )

    assert _names(result.items) == ["Bob"]


def test_browse_min_rating_filters_after_aggregation(db_session, community):
    result = matching_service.browse_users(
        db_session, community.me.id, min_rating=4.0, presence=community.presence
    )

    assert _names(result.items) == ["Alice", "Carol"]
    assert result.total_count == 2


def test_browse_online_filter_uses_presence(db_session, community):
    community.presence.user_connected(community.bob.id, "bob-tab")

    online = matching_service.browse_users(
        db_session, community.me.id, is_online=True, presence=community.presence
    )
    offline = matching_service.browse_users(
        db_session, community.me.id, is_online=False, presence=community.presence
    )

    assert _names(online.items) == ["Bob"]
    assert online.items[0].is_online is True
    assert _names(offline.items) == ["Alice", "Carol", "Dave"]


def test_browse_paginates_after_filtering(db_session, community):
    page_two = matching_service.browse_users(
        db_session, community.me.id, page=2, limit=3, presence=community.presence
    )

    assert _names(page_two.items) == ["Dave"]
    assert page_two.total_count == 4
    assert page_two.page_size == 3
    assert page_two.total_pages == 2


def test_browse_limit_is_clamped(db_session, community):
    huge = matching_service.browse_users(
        db_session, community.me.id, limit=500, presence=community.presence
    )
    tiny = matching_service.browse_users(
        db_session, community.me.id, limit=0, presence=community.presence
    )

    assert huge.page_size == 50
    assert tiny.page_size == 1
    assert len(tiny.items) == 1
    assert tiny.total_pages == 4


def test_browse_past_last_page_is_empty(db_session, community):
    result = matching_service.browse_users(
        db_session, community.me.id, page=9, limit=2, presence=community.presence
    )

    assert result.items == []
    assert result.total_count == 4


# ======================
# DETAILS
# ======================

def test_match_details_include_learning_skills(db_session, community):
    details = matching_service.get_user_match_details(
        db_session, community.dave.id, community.me.id, presence=community.presence
    )

    assert details.name == "Dave"
    assert [(s.skill.name, s.is_offering) for s in details.skills] == [("Python", False)]
    assert details.review_count == 0


def test_match_details_for_unknown_user_is_none(db_session, community):
    assert matching_service.get_user_match_details(
        db_session, 9999, community.me.id, presence=community.presence
    ) is None


# ======================
# RECOMMENDATIONS
# ======================

def test_top_rated_orders_by_average_then_review_count(db_session, community):
    top = matching_service.get_top_rated_users(db_session, presence=community.presence)

    # Alice 5.0 (1), Carol 4.0 (2), Bob 3.0 (2); Me and Dave have no reviews
    assert _names(top) == ["Alice", "Carol", "Bob"]


def test_top_rated_tie_breaks_on_review_count(db_session, community):
    zed = _create_user(db_session, "Zed")
    _review(db_session, community.me, zed, community.python, 5)
    _review(db_session, community.dave, zed, community.python, 5)

    top = matching_service.get_top_rated_users(db_session, presence=community.presence)

    # Zed and Alice both average 5.0; Zed has more reviews
    assert _names(top) == ["Zed", "Alice", "Carol", "Bob"]
    assert [m.review_count for m in top[:2]] == [2, 1]


def test_top_rated_category_and_limit(db_session, community):
    music = matching_service.get_top_rated_users(
        db_session, category="MUSIC", presence=community.presence
    )
    first = matching_service.get_top_rated_users(db_session, limit=1, presence=community.presence)

    assert _names(music) == ["Bob"]
    assert _names(first) == ["Alice"]


def test_recommended_matches_offerers_of_learning_interests(db_session, community):
    recommended = matching_service.get_recommended_matches(
        db_session, community.me.id, presence=community.presence
    )

    assert _names(recommended) == ["Alice"]


def test_recommended_excludes_caller(db_session, community):
    _link(db_session, community.alice, community.guitar, is_offering=False)
    _link(db_session, community.me, community.guitar, is_offering=True)

    recommended = matching_service.get_recommended_matches(
        db_session, community.alice.id, presence=community.presence
    )

    assert _names(recommended) == ["Bob", "Me"]


def test_recommended_falls_back_to_top_rated(db_session, community):
    recommended = matching_service.get_recommended_matches(
        db_session, community.bob.id, limit=5, presence=community.presence
    )
    top = matching_service.get_top_rated_users(db_session, None, 5, presence=community.presence)

    assert [m.id for m in recommended] == [m.id for m in top]


# ======================
# FILTER COMBINATIONS
# ======================

def test_category_and_skill_name_may_match_different_offered_skills(db_session, community):
    _link(db_session, community.bob, community.python, is_offering=True)

    result = matching_service.browse_users(
        db_session, community.me.id, category="Music", skill_name="Python",
        presence=community.presence,
    )

    # Alice offers Python but nothing in Music
    assert _names(result.items) == ["Bob"]


@pytest.mark.parametrize("term", ["%", "_ython", "Pyth%"])
def test_skill_name_wildcards_match_literally(db_session, community, term):
    result = matching_service.browse_users(
        db_session, community.me.id, skill_name=term, presence=community.presence
    )

    assert result.items == []
    assert result.total_count == 0


def test_skill_name_with_literal_percent(db_session, community):
    focus = _create_skill(db_session, "100% Focus", "Wellbeing")
    _link(db_session, community.carol, focus, is_offering=True)

    result = matching_service.browse_users(
        db_session, community.me.id, skill_name="0% f", presence=community.presence
    )

    assert _names(result.items) == ["Carol"]

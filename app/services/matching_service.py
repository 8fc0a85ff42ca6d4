# app/services/matching_service.py
"""
Matching & Recommendation Service

Read-only queries that turn users, their skills and the reviews they have
received into browsable UserMatch profiles. Rating and presence are
aggregated in Python after the SQL filters, so min_rating / is_online
filtering and pagination always see the same candidate list.
"""

import logging
import math
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app import models
from app.config import settings
from app.schemas.matching import PagedResult, UserMatch
from app.schemas.skill import UserSkillSummary
from app.services.presence_service import UserPresenceService, get_presence_service

logger = logging.getLogger(__name__)

MAX_BROWSE_LIMIT = settings.MAX_BROWSE_LIMIT


def average_rating(reviews: Iterable[models.Review]) -> float:
    """Arithmetic mean of review ratings; 0.0 when there are none."""
    ratings = [review.rating for review in reviews]
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def _clamp_limit(limit: Optional[int], default: int) -> int:
    if limit is None:
        limit = default
    return max(1, min(int(limit), MAX_BROWSE_LIMIT))


def _base_user_query(db: Session):
    return db.query(models.User).options(
        selectinload(models.User.user_skills).selectinload(models.UserSkill.skill),
        selectinload(models.User.reviews_received),
    )


def _offers_skill(skill_criterion):
    """EXISTS clause: the user offers at least one skill matching the criterion."""
    return models.User.user_skills.any(
        models.UserSkill.is_offering.is_(True) &
        models.UserSkill.skill.has(skill_criterion)
    )


def _category_filter(category: str):
    return _offers_skill(func.lower(models.Skill.category) == category.strip().lower())


def _skill_name_filter(skill_name: str):
    # % and _ in the term match literally
    return _offers_skill(models.Skill.name.icontains(skill_name.strip(), autoescape=True))


def _to_match(
    user: models.User,
    presence: UserPresenceService,
    offered_only: bool = True,
) -> UserMatch:
    user_skills = [
        us for us in user.user_skills
        if us.is_offering or not offered_only
    ]
    return UserMatch(
        id=user.id,
        name=user.name,
        email=user.email,
        bio=user.bio,
        profile_image_url=user.profile_image_url,
        time_credits=user.time_credits,
        rating=average_rating(user.reviews_received),
        review_count=len(user.reviews_received),
        is_online=presence.is_user_online(user.id),
        skills=[UserSkillSummary.model_validate(us) for us in user_skills],
    )


def _rank_key(match: UserMatch):
    return (-match.rating, -match.review_count, match.name, match.id)


# ======================
# BROWSE
# ======================

def browse_users(
    db: Session,
    current_user_id: int,
    category: Optional[str] = None,
    min_rating: Optional[float] = None,
    is_online: Optional[bool] = None,
    skill_name: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
    presence: Optional[UserPresenceService] = None,
) -> PagedResult[UserMatch]:
    """
    Page through other users, optionally narrowed by what they offer,
    their average rating and whether they are online.

    limit is clamped to [1, MAX_BROWSE_LIMIT]; page starts at 1.
    """
    presence = presence or get_presence_service()
    limit = _clamp_limit(limit, settings.DEFAULT_BROWSE_LIMIT)
    page = max(1, int(page or 1))

    query = _base_user_query(db).filter(models.User.id != current_user_id)
    # Each filter may be satisfied by a different offered skill
    if category:
        query = query.filter(_category_filter(category))
    if skill_name:
        query = query.filter(_skill_name_filter(skill_name))
    users = query.order_by(models.User.name.asc(), models.User.id.asc()).all()

    matches: List[UserMatch] = []
    for user in users:
        match = _to_match(user, presence)
        if min_rating is not None and match.rating < min_rating:
            continue
        if is_online is not None and match.is_online != is_online:
            continue
        matches.append(match)

    total_count = len(matches)
    offset = (page - 1) * limit
    logger.debug(
        "Browse for user %s matched %s users (page=%s, limit=%s)",
        current_user_id, total_count, page, limit,
    )
    return PagedResult[UserMatch](
        items=matches[offset:offset + limit],
        total_count=total_count,
        page=page,
        page_size=limit,
        total_pages=math.ceil(total_count / limit) if total_count else 0,
    )


def get_user_match_details(
    db: Session,
    target_user_id: int,
    current_user_id: int,
    presence: Optional[UserPresenceService] = None,
) -> Optional[UserMatch]:
    """Full profile of one user, including the skills they want to learn."""
    presence = presence or get_presence_service()
    user = _base_user_query(db).filter(models.User.id == target_user_id).first()
    if user is None:
        return None
    return _to_match(user, presence, offered_only=False)


# ======================
# RECOMMENDATIONS
# ======================

def get_top_rated_users(
    db: Session,
    category: Optional[str] = None,
    limit: int = 10,
    presence: Optional[UserPresenceService] = None,
) -> List[UserMatch]:
    """Users with at least one review, best average first."""
    presence = presence or get_presence_service()
    limit = _clamp_limit(limit, 10)

    query = _base_user_query(db).filter(models.User.reviews_received.any())
    if category:
        query = query.filter(_category_filter(category))

    matches = [_to_match(user, presence) for user in query.all()]
    matches.sort(key=_rank_key)
    return matches[:limit]


def get_recommended_matches(
    db: Session,
    user_id: int,
    limit: int = 10,
    presence: Optional[UserPresenceService] = None,
) -> List[UserMatch]:
    """
    Users offering a skill the caller wants to learn.

    Falls back to get_top_rated_users when the caller has no learning
    interests.
    """
    presence = presence or get_presence_service()
    limit = _clamp_limit(limit, 10)

    interest_ids = [
        skill_id for (skill_id,) in db.query(models.UserSkill.skill_id).filter(
            models.UserSkill.user_id == user_id,
            models.UserSkill.is_offering.is_(False),
        ).all()
    ]
    if not interest_ids:
        logger.debug("User %s has no learning interests; using top rated", user_id)
        return get_top_rated_users(db, None, limit, presence=presence)

    users = _base_user_query(db).filter(
        models.User.id != user_id,
        models.User.user_skills.any(
            (models.UserSkill.skill_id.in_(interest_ids)) &
            (models.UserSkill.is_offering.is_(True))
        ),
    ).all()

    matches = [_to_match(user, presence) for user in users]
    matches.sort(key=_rank_key)
    return matches[:limit]

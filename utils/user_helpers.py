"""Helpers converting user models into Pydantic schemas."""
from models.user import User
from schemas.user import ProfileRead


def to_profile_read(user: User) -> ProfileRead:
    """Convert a user model into its public ProfileRead."""
    return ProfileRead(
        user_id=user.id,
        nickname=user.nickname,
        birth_date=user.birth_date,
        gender=user.gender,
        location=user.location,
        about=user.about,
        profile_picture_path=user.profile_picture_path,
        created_at=user.created_at,
    )

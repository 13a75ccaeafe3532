# src/newsroom_backend/app/db/models.py

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


class Topic(Base):
    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    title = Column(String, nullable=False, default="")
    short_title = Column(String)
    topic_name = Column(String)
    state = Column(String, index=True)

    published_date = Column(TIMESTAMP(timezone=True), index=True)
    updated_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    og_title = Column(String)
    og_description = Column(String)
    og_image = Column(String)
    leading_image = Column(String)

    # full-projection fields
    subtitle = Column(String)
    headline = Column(String)
    description = Column(Text)
    team_description = Column(Text)
    title_position = Column(String)
    leading_video = Column(String)
    leading_image_portrait = Column(String)
    relateds = Column(JSON, nullable=False, default=list)  # related post slugs
    relateds_format = Column(String)
    relateds_background = Column(String)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String)
    first_name = Column(String)
    last_name = Column(String)
    privilege = Column(Integer, nullable=False, default=1)
    active = Column(Boolean, nullable=False, default=True)

    registration_date = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    oauth_accounts = relationship(
        "OAuthAccount",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class OAuthAccount(Base):
    """
    One external identity from an identity provider.

    Rules:
      - type: provider tag, e.g. "Facebook"
      - a_id: stable account id from that provider
      - (type, a_id) is globally unique; a user has 0..1 account per type.
    """

    __tablename__ = "oauth_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = Column(String, nullable=False)
    a_id = Column(String, nullable=False)

    # profile fields mirrored from the provider
    email = Column(String)
    name = Column(String)
    first_name = Column(String)
    last_name = Column(String)
    gender = Column(String(1))
    picture = Column(String)

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("type", "a_id", name="uq_oauth_account_type_aid"),
        UniqueConstraint("user_id", "type", name="uq_oauth_account_user_type"),
    )

    user = relationship("User", back_populates="oauth_accounts")

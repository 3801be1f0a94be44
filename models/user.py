"""
Provides the User model for the application's database schema.

The User model holds the local record of a staff member authenticated
through Clerk. It inherits common behaviors and attributes from the
`BaseModel`.

Attributes
----------
clerk_user_id : sqlalchemy.Column
    Unique identifier for the user from the Clerk auth provider.
email : sqlalchemy.Column
    The email address of the user, which must also be unique.
username : sqlalchemy.Column
    The optional username chosen by the user.
user_type : sqlalchemy.Column
    Role claim carried by the auth token (``staff``, ``attorney``, ``admin``).
is_active : sqlalchemy.Column
    A boolean indicating if the user is active. Defaults to `True`.

Relationships
-------------
chat_conversations : sqlalchemy.orm.relationship
    One-to-many relationship with the `ChatConversation` model. Supports
    cascading deletes for related objects.
"""

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents a user entity in the application.

    :ivar clerk_user_id: Unique identifier for the user provided by Clerk.
    :type clerk_user_id: str
    :ivar email: Email address of the user. It must be unique.
    :type email: str
    :ivar username: Username of the user. This is optional.
    :type username: str
    :ivar user_type: Role of the user inside the firm.
    :type user_type: str
    :ivar is_active: Indicates whether the user account is active.
    :type is_active: bool
    """

    __tablename__ = "users"

    clerk_user_id = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), nullable=True, unique=True)
    username = Column(String(100))
    user_type = Column(String(50), nullable=False, default="staff")
    is_active = Column(Boolean, default=True)

    # Relationships
    chat_conversations = relationship("ChatConversation", back_populates="user", cascade="all, delete-orphan")

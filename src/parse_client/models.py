"""Pydantic models for common Parse objects."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, RootModel

PUBLIC_PERMISSION_KEY = "*"


class Permissions(BaseModel):
    """Read and write permissions for one ACL facet."""

    read: bool | None = None
    write: bool | None = None

    def equal(self, other: Permissions) -> bool:
        return bool(self.read) == bool(other.read) and bool(self.write) == bool(other.write)


class ACL(RootModel[dict[str, Permissions]]):
    """Permissions keyed by user id, ``role:<name>`` or ``*`` for the public."""

    root: dict[str, Permissions] = Field(default_factory=dict)

    def public(self) -> Permissions | None:
        return self.root.get(PUBLIC_PERMISSION_KEY)

    def for_user_id(self, user_id: str) -> Permissions | None:
        return self.root.get(user_id)

    def for_role_name(self, role_name: str) -> Permissions | None:
        return self.root.get(f"role:{role_name}")


class ParseObject(BaseModel):
    """Fields every Parse object carries.

    Subclass it for application classes; unknown fields are kept so partial
    models still round-trip the rest of the object.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    object_id: str | None = Field(default=None, alias="objectId")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    acl: ACL | None = Field(default=None, alias="ACL")


class TwitterAuthData(BaseModel):
    id: str | None = None
    screen_name: str | None = None
    consumer_key: str | None = None
    consumer_secret: str | None = Field(default=None, repr=False)
    auth_token: str | None = Field(default=None, repr=False)
    auth_token_secret: str | None = Field(default=None, repr=False)


class FacebookAuthData(BaseModel):
    id: str | None = None
    access_token: str | None = Field(default=None, repr=False)
    expiration_date: datetime | None = None


class AnonymousAuthData(BaseModel):
    id: str | None = None


class AuthData(BaseModel):
    twitter: TwitterAuthData | None = None
    facebook: FacebookAuthData | None = None
    anonymous: AnonymousAuthData | None = None


class User(ParseObject):
    """A ``_User`` object."""

    email: str | None = None
    username: str | None = None
    phone: str | None = None
    email_verified: bool | None = Field(default=None, alias="emailVerified")
    session_token: str | None = Field(default=None, alias="sessionToken", repr=False)
    auth_data: AuthData | None = Field(default=None, alias="authData")

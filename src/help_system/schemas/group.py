"""Special access group schema definitions."""

from pydantic import BaseModel

from help_system.schemas.common import Capability, Role


class GroupMember(BaseModel):
    username: str
    group_name: str
    admin_rights: bool
    viewing_rights: bool
    role: Role


class CreateGroupRequest(BaseModel):
    group_name: str


class AddMemberRequest(BaseModel):
    username: str
    role: Role


class GrantRightsRequest(BaseModel):
    username: str
    capability: Capability

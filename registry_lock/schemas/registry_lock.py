from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LockView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domain_name: str = Field(alias="fullyQualifiedDomainName")
    locked_time: str = Field(alias="lockedTime")
    locked_by: str | None = Field(alias="lockedBy")
    user_can_unlock: bool = Field(alias="userCanUnlock")


class RegistryLockStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lock_enabled_for_contact: bool = Field(alias="lockEnabledForContact")
    email: str
    client_id: str = Field(alias="clientId")
    locks: list[LockView]


class RegistryLockGetResponse(BaseModel):
    status: Literal["SUCCESS", "ERROR"] = "SUCCESS"
    message: str
    results: list[RegistryLockStatus]


class RegistryLockPostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(alias="clientId", min_length=1, max_length=64)
    domain_name: str = Field(alias="fullyQualifiedDomainName", min_length=1, max_length=255)
    is_lock: bool = Field(alias="isLock")


class LockActionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    domain_name: str = Field(alias="fullyQualifiedDomainName")
    action: Literal["lock", "unlock"]


class LockActionResponse(BaseModel):
    status: Literal["SUCCESS", "ERROR"] = "SUCCESS"
    message: str
    results: list[LockActionResult]

"""授权声明(期望状态)加载与校验.

声明文件格式(YAML):

.. code-block:: yaml

    grants:
      - user: app@%
        table: app_db.*
        privileges: [SELECT, INSERT, UPDATE (id, name)]
        options: [GRANT]
      - user: old@%
        table: app_db.*
        ensure: absent
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from grantsync.core.constants.mysql_privileges import ALL_PRIVILEGES_TOKEN, GRANT_OPTION, NO_OPTION, PROXY_PRIVILEGE
from grantsync.core.exceptions import ValidationError
from grantsync.core.types.grants import GrantIdentity, GrantRecord, normalize_options, normalize_privileges
from grantsync.services.grants.grant_parser import split_privileges, strip_quotes
from grantsync.utils.structlog_config import get_system_logger

logger = get_system_logger()


class DesiredGrant(BaseModel):
    """单条授权声明."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    user: str
    table: str
    privileges: tuple[str, ...] = ()
    options: tuple[str, ...] = (NO_OPTION,)
    ensure: Literal["present", "absent"] = "present"
    name: str | None = Field(default=None)

    @field_validator("user")
    @classmethod
    def _validate_user(cls, value: str) -> str:
        value = strip_quotes(value)
        user, sep, host = value.rpartition("@")
        if not sep or not user or not host:
            msg = f"user 必须是 user@host 格式: {value}"
            raise ValueError(msg)
        return value

    @field_validator("table")
    @classmethod
    def _validate_table(cls, value: str) -> str:
        value = strip_quotes(value)
        if not value:
            msg = "table 不能为空"
            raise ValueError(msg)
        return value

    @field_validator("privileges", mode="before")
    @classmethod
    def _normalize_privileges(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        # "SELECT, INSERT" 与 ["SELECT", "INSERT"] 等价,按顶层逗号切分
        items = [value] if isinstance(value, str) else list(value)
        return normalize_privileges(
            token for item in items for token in split_privileges(strip_quotes(str(item)))
        )

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return (NO_OPTION,)
        items = [value] if isinstance(value, str) else list(value)
        upper = [str(item).strip().upper() for item in items]
        invalid = [item for item in upper if item not in {GRANT_OPTION, NO_OPTION}]
        if invalid:
            msg = f"options 只允许 GRANT 或 NONE: {invalid}"
            raise ValueError(msg)
        return normalize_options(upper)

    @model_validator(mode="after")
    def _validate_combination(self) -> DesiredGrant:
        if self.name is not None and self.name != f"{self.user}/{self.table}":
            msg = f"name 必须等于 user/table: {self.name}"
            raise ValueError(msg)
        if self.ensure == "present" and not self.privileges:
            msg = f"privileges 不能为空: {self.user}/{self.table}"
            raise ValueError(msg)
        if ALL_PRIVILEGES_TOKEN in self.privileges and len(self.privileges) > 1:
            msg = "ALL 不能与其他权限同时声明"
            raise ValueError(msg)
        if PROXY_PRIVILEGE in self.privileges and len(self.privileges) > 1:
            msg = "PROXY 必须是唯一的权限"
            raise ValueError(msg)
        return self

    def to_record(self) -> GrantRecord:
        return GrantRecord(
            identity=GrantIdentity.from_principal(self.user, self.table),
            privileges=self.privileges,
            options=self.options,
        )


class DesiredState(BaseModel):
    """授权声明集合."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    grants: tuple[DesiredGrant, ...] = ()

    @model_validator(mode="after")
    def _validate_unique(self) -> DesiredState:
        seen: set[str] = set()
        for grant in self.grants:
            key = f"{grant.user}/{grant.table}"
            if key in seen:
                msg = f"重复的授权声明: {key}"
                raise ValueError(msg)
            seen.add(key)
        return self

    def present(self) -> dict[str, GrantRecord]:
        """ensure=present 的声明,以授权标识为键."""
        records = [grant.to_record() for grant in self.grants if grant.ensure == "present"]
        return {record.name: record for record in records}

    def absent(self) -> dict[str, GrantIdentity]:
        """ensure=absent 的声明."""
        identities = [
            GrantIdentity.from_principal(grant.user, grant.table) for grant in self.grants if grant.ensure == "absent"
        ]
        return {identity.name: identity for identity in identities}


def build_desired_state(payload: Mapping[str, Any] | Iterable[Mapping[str, Any]] | None) -> DesiredState:
    """从字典(或声明列表)构建 DesiredState.

    Args:
        payload: ``{"grants": [...]}`` 或声明列表.

    Returns:
        DesiredState: 校验后的声明集合.

    Raises:
        ValidationError: 声明不合法时抛出.

    """
    if payload is None:
        payload = {}
    data = payload if isinstance(payload, Mapping) else {"grants": list(payload)}
    try:
        return DesiredState.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"授权声明校验失败: {exc.error_count()} 处错误",
            extra={"errors": [error["msg"] for error in exc.errors()]},
        ) from exc


def load_desired_grants(path: str | Path) -> DesiredState:
    """从 YAML 文件加载授权声明.

    Args:
        path: 声明文件路径.

    Returns:
        DesiredState: 校验后的声明集合.

    Raises:
        ValidationError: 文件不存在、YAML 解析失败或声明不合法时抛出.

    """
    config_file = Path(path)
    if not config_file.exists():
        logger.error("grants_file_not_found", module="desired_state", path=str(config_file))
        raise ValidationError(f"授权声明文件不存在: {config_file}", message_key="CONFIG_FILE_NOT_FOUND")

    try:
        with config_file.open(encoding="utf-8") as buffer:
            payload = yaml.safe_load(buffer) or {}
    except yaml.YAMLError as exc:
        logger.exception("grants_file_parse_failed", module="desired_state", path=str(config_file))
        raise ValidationError(f"解析授权声明文件失败: {exc}", message_key="CONFIG_FILE_INVALID") from exc

    if not isinstance(payload, Mapping):
        raise ValidationError("授权声明文件格式错误,顶层必须是映射", message_key="CONFIG_FILE_INVALID")

    state = build_desired_state(payload)
    logger.info(
        "grants_file_loaded",
        module="desired_state",
        path=str(config_file),
        grant_count=len(state.grants),
    )
    return state


__all__ = ["DesiredGrant", "DesiredState", "build_desired_state", "load_desired_grants"]

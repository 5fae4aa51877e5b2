import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

_ENV_PREFIX = "TYPEORM_TO_PRISMA_"

ModelCase = Literal["preserve", "camel"]


class CodemodSettings(BaseModel):
    """Names and conventions the rewrite targets."""

    model_config = ConfigDict(frozen=True)

    client_member: str = "prisma"
    client_service: str = "PrismaService"
    client_service_path: str = "./prisma.service"
    module_name: str = "PrismaModule"
    module_path: str = "./prisma/prisma.module"
    placeholder_model: str = "model"
    model_case: ModelCase = "preserve"
    repository_member_pattern: str = r"^(?:repository|\w+Repository)$"
    datasource_provider: str = "postgresql"
    model_mapping: dict[str, str] = Field(default_factory=dict)


_ENV_FIELDS = {
    "CLIENT_MEMBER": "client_member",
    "CLIENT_SERVICE": "client_service",
    "CLIENT_SERVICE_PATH": "client_service_path",
    "MODULE_NAME": "module_name",
    "MODULE_PATH": "module_path",
    "PLACEHOLDER_MODEL": "placeholder_model",
    "MODEL_CASE": "model_case",
    "REPOSITORY_MEMBER_PATTERN": "repository_member_pattern",
    "PROVIDER": "datasource_provider",
}


def parse_model_mapping(entries: list[str]) -> dict[str, str]:
    """Parse ``Name=model`` pairs into a mapping."""
    mapping: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key.strip() or not value.strip():
            raise ValueError(f"Invalid model mapping '{entry}'. Expected NAME=MODEL.")
        mapping[key.strip()] = value.strip()
    return mapping


def load_settings(**overrides: Any) -> CodemodSettings:
    """Build settings from ``TYPEORM_TO_PRISMA_*`` variables, then apply non-None overrides."""
    values: dict[str, Any] = {}
    for suffix, field_name in _ENV_FIELDS.items():
        env_value = os.getenv(_ENV_PREFIX + suffix)
        if env_value:
            values[field_name] = env_value

    env_mapping = os.getenv(_ENV_PREFIX + "MODEL_MAPPING")
    if env_mapping:
        values["model_mapping"] = parse_model_mapping([e for e in env_mapping.split(",") if e.strip()])

    values.update({k: v for k, v in overrides.items() if v is not None})
    return CodemodSettings(**values)

# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT

"""Pydantic models for host configuration (~/.config/vagrantbox/config.yml)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vagrantbox.paths import ImageDefaults


class ImageConfig(BaseModel):
    """Container image to wrap."""

    name: str = ImageDefaults.IMAGE_NAME
    tag: str = ImageDefaults.IMAGE_TAG

    @field_validator("name", "tag")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class RegistryConfig(BaseModel):
    """Registry used by publish."""

    url: str = ImageDefaults.REGISTRY
    username: Optional[str] = None


class ShellConfig(BaseModel):
    """Shell profile settings.

    profile: explicit profile path (skips auto-detection).
    workdir_mount_expr: shell expression mounted at ${PWD} inside the container.
    """

    profile: Optional[str] = None
    workdir_mount_expr: str = ImageDefaults.WORKDIR_MOUNT_EXPR


class LibvirtConfig(BaseModel):
    """libvirt settings. socket_dir forces a directory and skips probing."""

    socket_dir: Optional[str] = None

    @field_validator("socket_dir")
    @classmethod
    def must_be_absolute(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith("/"):
            raise ValueError(f"socket_dir must be an absolute path, got {v!r}")
        return v


class TimeoutsConfig(BaseModel):
    """Subprocess timeouts in seconds."""

    probe: float = 5.0
    shell: float = 20.0


class HostConfigModel(BaseModel):
    """Root of the host configuration file."""

    model_config = ConfigDict(extra="ignore")

    image: ImageConfig = Field(default_factory=ImageConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    shell: ShellConfig = Field(default_factory=ShellConfig)
    libvirt: LibvirtConfig = Field(default_factory=LibvirtConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)

"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from modtrack.contracts.profile import DEFAULT_PROFILE_ID, Profile, normalize_profile_id


class InstallPreferences(BaseModel):
    use_symlinks: bool = False
    set_xattr_comment: bool = False


class ModTrackConfig(BaseModel):
    registry_path: Path = Path("modtrack-registry.json")
    profiles: list[Profile] = Field(default_factory=lambda: [Profile()])
    active_profile: str = DEFAULT_PROFILE_ID
    auth: str = "env"
    token: str | None = None
    max_concurrent: int = Field(default=4, ge=1, le=10)
    check_timeout: float = Field(default=30.0, gt=0)
    batch_timeout: float | None = Field(default=600.0, gt=0)
    release_cache_ttl: float = Field(default=45.0, ge=0)
    install_options: InstallPreferences = Field(default_factory=InstallPreferences)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_auth_token(self) -> ModTrackConfig:
        token = (self.token or "").strip()
        if self.auth not in {"env", "token", "none"}:
            raise ValueError("auth must be one of: env, token, none")
        if self.auth == "token":
            if not token:
                raise ValueError("token auth requires a non-empty token")
            return self
        if token:
            raise ValueError("token must be unset when auth is not 'token'")
        return self

    @model_validator(mode="after")
    def validate_profiles(self) -> ModTrackConfig:
        ids = [profile.id for profile in self.profiles]
        if len(ids) != len(set(ids)):
            raise ValueError("profile ids must be unique")
        if normalize_profile_id(self.active_profile) not in ids:
            raise ValueError(f"active_profile '{self.active_profile}' is not a configured profile")
        return self

    def profile(self, profile_id: str | None = None) -> Profile:
        wanted = normalize_profile_id(profile_id or self.active_profile)
        for profile in self.profiles:
            if profile.id == wanted:
                return profile
        raise KeyError(wanted)

"""Pydantic models for provider configuration."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class AssumeRoleConfig(BaseModel):
    """IAM role to assume for all API calls."""

    role_arn: str = Field(..., pattern=r"^arn:aws[a-z-]*:iam::\d{12}:role/.+$")
    session_name: str = "tfaws"
    external_id: Optional[str] = None
    duration_seconds: int = Field(3600, ge=900, le=43200)


class IgnoreTagsConfig(BaseModel):
    """Tag keys the provider never reads back or reconciles."""

    keys: List[str] = Field(default_factory=list)
    key_prefixes: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.keys and not self.key_prefixes


def _validate_tag_map(tags: Dict[str, str]) -> Dict[str, str]:
    for key, value in tags.items():
        if not key:
            raise ValueError("Tag key cannot be empty")
        if len(key) > 128:
            raise ValueError(f"Tag key exceeds 128 characters: {key}")
        if key.startswith("aws:"):
            raise ValueError(f"Tag key cannot start with 'aws:' (reserved): {key}")
        if value is not None and len(value) > 256:
            raise ValueError(f"Tag value exceeds 256 characters for key '{key}'")
    return tags


class ProviderConfig(BaseModel):
    """Provider-wide settings shared by every resource handler."""

    region: Optional[str] = Field(None, pattern=r"^[a-z]{2}(-[a-z]+)+-\d$")
    profile: Optional[str] = None
    assume_role: Optional[AssumeRoleConfig] = None
    max_retries: int = Field(5, ge=0, le=25)
    default_tags: Dict[str, str] = Field(default_factory=dict)
    ignore_tags: IgnoreTagsConfig = Field(default_factory=IgnoreTagsConfig)

    @field_validator("default_tags")
    @classmethod
    def validate_default_tags(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Validate default tag keys and values."""
        return _validate_tag_map(v)


class SweepConfig(BaseModel):
    """Which sweepers to run, and where."""

    regions: List[str] = Field(default_factory=list)
    sweepers: List[str] = Field(default_factory=list, description="Empty means all sweepers")
    allow_failures: bool = False

    @field_validator("regions")
    @classmethod
    def validate_regions(cls, v: List[str]) -> List[str]:
        """Drop blanks and duplicates while keeping order."""
        seen = []
        for region in v:
            region = region.strip()
            if region and region not in seen:
                seen.append(region)
        return seen


class TfawsConfig(BaseModel):
    """Top-level contents of tfaws.yaml."""

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    sweep: SweepConfig = Field(default_factory=SweepConfig)

    @model_validator(mode="after")
    def default_sweep_region(self):
        """Sweep the provider region when no sweep regions are listed."""
        if not self.sweep.regions and self.provider.region:
            self.sweep.regions = [self.provider.region]
        return self

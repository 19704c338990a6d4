"""Generation request, result and upstream payload models."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

GenerationKind = Literal["username", "name", "both"]

# Platform value the client sends when the user typed their own platform
CUSTOM_PLATFORM = "custom"


class GenerationRequest(BaseModel):
    """Request body for the generate endpoint.

    The wire name of ``kind`` is ``type``. ``count`` is strict: strings and
    booleans are rejected rather than coerced.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: GenerationKind = Field(..., alias="type")
    count: int = Field(..., strict=True, ge=1, le=10)
    platform: str = Field(..., strict=True, min_length=1)
    theme: str | None = None
    purpose: str | None = None
    custom_platform: str | None = Field(
        default=None,
        alias="customPlatform",
        description="Free-form platform used when platform is 'custom'",
    )

    @property
    def upstream_platform(self) -> str:
        """Platform value forwarded to the upstream service."""
        if self.platform == CUSTOM_PLATFORM and self.custom_platform and self.custom_platform.strip():
            return self.custom_platform.strip()
        return self.platform


class GenerationResult(BaseModel):
    """One generated item.

    Field values are passed through as the upstream sent them and unknown
    upstream fields are kept.
    """

    model_config = ConfigDict(extra="allow")

    name: Any = None
    username: Any = None


# =============================================================================
# Upstream payload shapes
# =============================================================================


class DirectResponse(BaseModel):
    """Payload that is already the result sequence."""

    shape: Literal["direct"] = "direct"
    items: Any


class WrappedResponse(BaseModel):
    """Warning-wrapped payload carrying a pre-serialized JSON string."""

    shape: Literal["wrapped"] = "wrapped"
    raw: str


UpstreamResponse = Annotated[
    Union[DirectResponse, WrappedResponse],
    Field(discriminator="shape"),
]

"""Messages exchanged between an embedded storefront iframe and its host page.

The iframe posts ``{"height": <number>}`` whenever its content size changes
and the host may ask it to come into view with ``{"scrollToIframe": true}``.
There is no versioning; anything else is ignored.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class EmbedHeightMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    height: float = Field(..., ge=0)


class ScrollToIframeMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    scroll_to_iframe: Literal[True] = Field(..., alias="scrollToIframe")


EmbedMessage = Union[EmbedHeightMessage, ScrollToIframeMessage]


def parse_embed_message(payload: Any) -> Optional[EmbedMessage]:
    """Parse a postMessage payload, returning None for unrelated messages."""
    if not isinstance(payload, dict):
        return None
    for message_type in (EmbedHeightMessage, ScrollToIframeMessage):
        try:
            return message_type.model_validate(payload)
        except ValidationError:
            continue
    return None


class EmbedConfig(BaseModel):
    """Settings an embedding host needs to render a reseller storefront."""

    reseller_id: str
    logo_url: Optional[str] = None
    language: str = "sv"
    secondary_language: Optional[str] = None
    enable_language_switcher: bool = False
    currency: str = "SEK"
    exchange_rate: float = 1.0
    hidden_makes: list[str] = Field(default_factory=list)
    show_dyno_chart: bool = True
    allowed_messages: list[str] = Field(
        default_factory=lambda: ["height", "scrollToIframe"]
    )

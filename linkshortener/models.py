from dataclasses import dataclass
from datetime import datetime, timedelta

from linkshortener.constants import TTL


# fmt: off
@dataclass(frozen=True)
class LinkRecord:
    shortcode: str                      # Unique short identifier of the link
    target: str                         # Validated original long URL
    created_at: datetime                # Creation moment (UTC), immutable
    expires_at: datetime                # Store-side expiry moment (UTC)
    click_count: int = 0                # Write-only redirect counter

    @classmethod
    def new(cls, shortcode: str, target: str, created_at: datetime) -> 'LinkRecord':
        """Build a fresh record expiring TTL.LINK_RECORD seconds after `created_at`."""
        return cls(
            shortcode=shortcode,
            target=target,
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=TTL.LINK_RECORD),
            click_count=0,
        )


@dataclass(frozen=True)
class ValidationResult:
    valid: bool                         # True if the URL is safe to redirect to
    reason: str | None = None           # Human readable rejection reason


@dataclass(frozen=True)
class CreatedLink:
    shortcode: str                      # Newly allocated short code
    target: str                         # Canonicalized target URL
# fmt: on

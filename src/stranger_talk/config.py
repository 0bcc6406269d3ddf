"""Configuration objects for the StrangerTalk bot."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class FilterConfig:
    """Configures the bad-word filter applied to relayed text."""

    banned_words: set[str] = field(
        default_factory=lambda: {
            "spam",
            "scam",
            "porn",
            "xxx",
            "sex",
            "nude",
            "drugs",
        }
    )
    mask_char: str = "*"


@dataclass(slots=True)
class ModerationConfig:
    """Report handling rules."""

    report_threshold: int = 3
    # When enabled a reporter counts only once per session against a partner.
    dedupe_reports_per_session: bool = False


@dataclass(slots=True)
class SupportConfig:
    """Supporter perks and revenue reporting for Telegram Stars."""

    annotation_threshold: int = 50
    usd_per_star: float = 0.013

    def convert_stars_to_usd(self, stars: int) -> float:
        if stars <= 0:
            return 0.0
        if self.usd_per_star <= 0:
            raise ValueError("Exchange rate must be positive")
        return stars * self.usd_per_star

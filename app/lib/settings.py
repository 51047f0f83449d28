"""Process configuration loaded from environment variables."""

import os
from dataclasses import dataclass, field
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


@dataclass
class Settings:
    discord_token: str
    public_key: Optional[str] = None
    leaderboard_channel_id: Optional[int] = None
    interactions_host: str = "0.0.0.0"
    interactions_port: int = 3000
    roster_file: Optional[str] = None
    leaderboard_interval: int = 21600
    owner_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration from environment variables."""
        token = os.getenv("DISCORD_TOKEN")
        if not token:
            raise RuntimeError("DISCORD_TOKEN not found in environment variables. Please set it in your .env file.")

        return cls(
            discord_token=token,
            public_key=os.getenv("PUBLIC_KEY") or None,
            leaderboard_channel_id=_optional_int("LEADERBOARD_CHANNEL_ID"),
            interactions_host=os.getenv("INTERACTIONS_HOST", "0.0.0.0"),
            interactions_port=int(os.getenv("PORT", "3000")),
            roster_file=os.getenv("ROSTER_FILE") or None,
            leaderboard_interval=int(os.getenv("LEADERBOARD_INTERVAL", "21600")),
            owner_ids=[int(x) for x in os.getenv("OWNER_IDS", "").split(",") if x.strip()],
        )

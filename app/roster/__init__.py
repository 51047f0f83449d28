import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Mapping, Optional

from app.logger import logger


class PlatformEnum(str, Enum):
    PC = "pc"
    PS4 = "ps4"
    PS5 = "ps5"
    XBOX_ONE = "xboxone"
    XBOX_SERIES = "xboxseries"


class RosterError(ValueError):
    """Raised when a roster definition cannot be turned into entries."""


@dataclass(frozen=True)
class RosterEntry:
    handle: str
    player_id: int
    user_id: int
    platform: PlatformEnum
    display_name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "platform", PlatformEnum(self.platform))
        if not self.display_name:
            object.__setattr__(self, "display_name", self.handle)


DEFAULT_ROSTER: dict[str, dict] = {
    "BlueDragon12336": {
        "player_id": 891692513,
        "user_id": 1000091551547,
        "platform": "xboxone",
    },
    "Waterishshark67": {
        "player_id": 1845585091,
        "user_id": 1004812473201,
        "platform": "xboxone",
    },
}


class RosterRegistry:
    """
    Read-only lookup of the known squad members, keyed by in-game handle.
    Built once at startup and handed to whatever needs it.
    """

    def __init__(self, entries: list[RosterEntry]):
        self._entries: dict[str, RosterEntry] = {}
        for entry in entries:
            if entry.handle in self._entries:
                raise RosterError(f"Duplicate roster handle: {entry.handle}")
            self._entries[entry.handle] = entry
        self._folded: dict[str, RosterEntry] = {}
        for handle, entry in self._entries.items():
            folded = handle.casefold()
            if folded in self._folded:
                raise RosterError(f"Roster handles differ only by case: {self._folded[folded].handle}, {handle}")
            self._folded[folded] = entry

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Mapping]) -> "RosterRegistry":
        entries = []
        for handle, info in mapping.items():
            try:
                entries.append(RosterEntry(
                    handle=handle,
                    player_id=int(info["player_id"]),
                    user_id=int(info["user_id"]),
                    platform=PlatformEnum(info["platform"]),
                    display_name=info.get("display_name") or handle,
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise RosterError(f"Invalid roster entry for {handle}: {e}") from e
        return cls(entries)

    @classmethod
    def load(cls, path: str | Path) -> "RosterRegistry":
        """
        Build a registry from a JSON file shaped like DEFAULT_ROSTER.
        :param path: location of the roster file
        :return: the populated registry
        """
        try:
            with open(path, encoding="utf-8") as fp:
                data = json.load(fp)
        except (OSError, json.JSONDecodeError) as e:
            raise RosterError(f"Cannot read roster file {path}: {e}") from e
        if not isinstance(data, dict):
            raise RosterError(f"Roster file {path} must contain a JSON object")
        registry = cls.from_mapping(data)
        logger.info(f"Loaded {len(registry)} roster entries from {path}")
        return registry

    def resolve(self, handle: str) -> Optional[RosterEntry]:
        entry = self._entries.get(handle)
        if entry is None and isinstance(handle, str):
            entry = self._folded.get(handle.casefold())
        return entry

    def match(self, player_id: Optional[int] = None, user_id: Optional[int] = None) -> Optional[RosterEntry]:
        """First entry whose player id or user id equals the given one."""
        if player_id is None and user_id is None:
            return None
        for entry in self._entries.values():
            if player_id is not None and entry.player_id == player_id:
                return entry
            if user_id is not None and entry.user_id == user_id:
                return entry
        return None

    def handles(self) -> list[str]:
        return list(self._entries)

    def __iter__(self) -> Iterator[RosterEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, handle) -> bool:
        return self.resolve(handle) is not None

import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

from app.gametools import fetch_squad_stats
from app.gametools.structures import StatsQuery, StatsResult
from app.logger import logger
from app.roster import RosterRegistry

UNKNOWN_PLAYER = "Unknown Soldier"
NOT_AVAILABLE = "N/A"

# Approximate progression curve; not a verified game formula.
LEVEL_THRESHOLD_XP = 650000
LEVEL_AT_THRESHOLD = 50
LOW_LEVEL_XP = 13000
HIGH_LEVEL_XP = 25000

StatsFetcher = Callable[[list[StatsQuery]], Awaitable[Any]]


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    display_name: str
    level: int
    kd: float
    kills: int
    deaths: int
    assists: int
    revives: int
    accuracy: float
    top_class: str
    top_vehicle: str
    top_weapon: str


def _number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    elif not isinstance(value, (int, float)):
        return default
    try:
        value = float(value)
    except (ValueError, OverflowError):
        return default
    return value if math.isfinite(value) else default


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def build_queries(registry: RosterRegistry, handles: Iterable[str]) -> list[StatsQuery]:
    """
    Turns handles into request entries, skipping the ones the roster does not know.
    """
    queries: list[StatsQuery] = []
    seen: set[str] = set()
    for handle in handles:
        entry = registry.resolve(handle)
        if entry is None:
            logger.warning(f"{handle} was not found in the roster. Skipping...")
            continue
        if entry.handle in seen:
            continue
        seen.add(entry.handle)
        queries.append(StatsQuery(
            name=entry.handle,
            player_id=entry.player_id,
            user_id=entry.user_id,
            platform=entry.platform.value,
            skip_battlelog=True
        ))
    return queries


def normalize_response(body: Any) -> list[StatsResult]:
    """
    Accepts a {"data": [...]} wrapper or a bare body, and a list or a single record.
    """
    data = body
    if isinstance(body, dict) and body.get("data") is not None:
        data = body["data"]
    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]
    return [item for item in data if isinstance(item, dict)]


def sort_by_kill_death(results: list[StatsResult]) -> list[StatsResult]:
    # stable: equal ratios keep the API order
    return sorted(results, key=lambda result: _number(result.get("killDeath")), reverse=True)


def level_from_xp(xp: Any) -> int:
    xp = max(0, int(_number(xp)))
    if xp < LEVEL_THRESHOLD_XP:
        return max(1, xp // LOW_LEVEL_XP)
    return LEVEL_AT_THRESHOLD + (xp - LEVEL_THRESHOLD_XP) // HIGH_LEVEL_XP


def total_experience(result: StatsResult) -> int:
    experience = result.get("XP")
    if isinstance(experience, list):
        return int(_number(sum(_number(entry.get("total")) for entry in experience if isinstance(entry, dict))))
    return int(_number(experience))


def derive_level(result: StatsResult) -> int:
    for key in ("rank", "level"):
        explicit = _as_int(result.get(key))
        if explicit is not None:
            return explicit
    return level_from_xp(total_experience(result))


def top_entry(entries: Any, name_key: str) -> str:
    """
    Name of the entry with the most kills. Ties go to the first one encountered.
    """
    if not isinstance(entries, list):
        return NOT_AVAILABLE
    best: Optional[dict] = None
    best_kills = 0.0
    for item in entries:
        if not isinstance(item, dict):
            continue
        kills = _number(item.get("kills"))
        if best is None or kills > best_kills:
            best, best_kills = item, kills
    if best is None:
        return NOT_AVAILABLE
    name = best.get(name_key) or best.get("name")
    return name if isinstance(name, str) and name else NOT_AVAILABLE


def resolve_display_name(registry: RosterRegistry, result: StatsResult) -> str:
    """
    Joins a result back to the roster: ids first, then the roster key, then whatever name the API sent.
    """
    player_id = next(
        (_as_int(result.get(key)) for key in ("id", "playerId", "player_id") if result.get(key) is not None),
        None
    )
    user_id = _as_int(result.get("userId", result.get("user_id")))
    entry = registry.match(player_id=player_id, user_id=user_id)
    if entry is not None:
        return entry.display_name

    username = result.get("userName") or result.get("name")
    if isinstance(username, str) and username.strip():
        entry = registry.resolve(username)
        if entry is not None:
            return entry.display_name
        return username
    return UNKNOWN_PLAYER


def build_row(registry: RosterRegistry, position: int, result: StatsResult) -> LeaderboardRow:
    return LeaderboardRow(
        rank=position,
        display_name=resolve_display_name(registry, result),
        level=derive_level(result),
        kd=round(_number(result.get("killDeath")), 2),
        kills=int(_number(result.get("kills"))),
        deaths=int(_number(result.get("deaths"))),
        assists=int(_number(result.get("killAssists", result.get("assists")))),
        revives=int(_number(result.get("revives"))),
        accuracy=round(_number(result.get("accuracy")), 2),
        top_class=top_entry(result.get("classes"), "className"),
        top_vehicle=top_entry(result.get("vehicles"), "vehicleName"),
        top_weapon=top_entry(result.get("weapons"), "weaponName"),
    )


class StatsAggregator:
    """
    Fetches the stats of a set of roster members in one request and ranks them by K/D.
    An empty result always means "no data", never "no players".
    """

    def __init__(self, registry: RosterRegistry, fetcher: StatsFetcher = fetch_squad_stats):
        self.registry = registry
        self.fetcher = fetcher

    async def fetch_leaderboard(self, handles: Iterable[str]) -> list[LeaderboardRow]:
        queries = build_queries(self.registry, handles)
        if not queries:
            logger.info("No roster entries resolved, skipping the stats request.")
            return []

        try:
            body = await self.fetcher(queries)
        except Exception as e:
            logger.error(f"Stats fetch failed for {len(queries)} players: {e}", exc_info=True)
            return []
        if body is None:
            logger.warning("Stats API returned no data.")
            return []

        results = sort_by_kill_death(normalize_response(body))
        logger.debug(f"Building leaderboard from {len(results)}/{len(queries)} results")
        return [build_row(self.registry, position, result) for position, result in enumerate(results, start=1)]

    async def fetch_roster_leaderboard(self) -> list[LeaderboardRow]:
        return await self.fetch_leaderboard(self.registry.handles())

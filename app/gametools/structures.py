from typing import TypedDict


class StatsQuery(TypedDict):
    """
    One entry of the batched request body sent to the multiple-players endpoint.
    """
    name: str
    player_id: int
    user_id: int
    platform: str
    skip_battlelog: bool


class ExperienceEntry(TypedDict, total=False):
    total: int
    performance: int
    accolades: int


class ClassStat(TypedDict, total=False):
    className: str
    kills: int
    deaths: int


class VehicleStat(TypedDict, total=False):
    vehicleName: str
    kills: int


class WeaponStat(TypedDict, total=False):
    weaponName: str
    kills: int
    accuracy: str


class StatsResult(TypedDict, total=False):
    """
    A single player's record as returned by the API. Nothing is guaranteed to be present.
    """
    userName: str
    id: int
    userId: int
    killDeath: float
    kills: int
    deaths: int
    killAssists: int
    revives: int
    accuracy: str | float
    rank: int
    level: int
    XP: list[ExperienceEntry]
    classes: list[ClassStat]
    vehicles: list[VehicleStat]
    weapons: list[WeaponStat]


class PlayerIds(TypedDict):
    user_name: str
    player_id: int
    user_id: int

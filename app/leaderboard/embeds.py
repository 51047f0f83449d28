import datetime

from discord import Colour, Embed

from app.leaderboard import LeaderboardRow

MAX_FIELDS = 25
MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}


def format_row(row: LeaderboardRow) -> str:
    return (
        f"Level: **{row.level}**\n"
        f"K/D: **{row.kd:.2f}** | Kills: {row.kills} | Deaths: {row.deaths}\n"
        f"Assists: {row.assists} | Revives: {row.revives} | Accuracy: {row.accuracy:.1f}%\n"
        f"Class: {row.top_class}\n"
        f"Vehicle: {row.top_vehicle}\n"
        f"Weapon: {row.top_weapon}"
    )


def build_leaderboard_embed(rows: list[LeaderboardRow], title: str = "🏆 Squad Leaderboard 🏆") -> Embed:
    """
    Renders the ranked rows as one embed, one field per player.
    Discord caps embeds at 25 fields, anything past that is dropped.
    """
    embed = Embed(
        title=title,
        description="Ranked by K/D ratio",
        colour=Colour.dark_gold(),
        timestamp=datetime.datetime.now(datetime.UTC)
    )
    for row in rows[:MAX_FIELDS]:
        prefix = MEDALS.get(row.rank, f"#{row.rank}")
        embed.add_field(name=f"{prefix} {row.display_name}", value=format_row(row), inline=False)
    embed.set_footer(text="Stats provided by gametools.network")
    return embed

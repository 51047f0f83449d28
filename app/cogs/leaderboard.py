from typing import TYPE_CHECKING

from discord import Cog
from discord.ext import commands, tasks

from app.gametools import lookup_player_ids
from app.leaderboard.embeds import build_leaderboard_embed
from app.logger import logger
from app.roster import PlatformEnum

if TYPE_CHECKING:
    from app.bot import SquadStatsBot


class LeaderboardCog(Cog):
    """
    Posts the squad leaderboard to the configured channel on a fixed interval.
    """

    def __init__(self, bot: "SquadStatsBot"):
        self.bot = bot
        self._poster_loop.change_interval(seconds=bot.settings.leaderboard_interval)
        self._poster_loop.start()

    def cog_unload(self):
        self._poster_loop.cancel()

    async def post_leaderboard(self) -> bool:
        """
        Fetches the roster stats and posts them as an embed.
        Nothing is sent when no stats are available.
        :return: True if a message was sent
        """
        channel_id = self.bot.settings.leaderboard_channel_id
        if channel_id is None:
            logger.warning("LEADERBOARD_CHANNEL_ID not set, skipping leaderboard post.")
            return False

        rows = await self.bot.aggregator.fetch_roster_leaderboard()
        if not rows:
            logger.info("No leaderboard data available, nothing posted.")
            return False

        message = await self.bot.send_to_channel(channel_id, embed=build_leaderboard_embed(rows))
        if message is None:
            logger.error(f"Leaderboard could not be posted to channel {channel_id}.")
            return False
        logger.info(f"Leaderboard with {len(rows)} players posted to channel {channel_id}.")
        return True

    @tasks.loop(hours=6)
    async def _poster_loop(self):
        if not self.bot.__ready__:
            return
        logger.info("Running scheduled leaderboard post...")
        await self.post_leaderboard()

    @_poster_loop.before_loop
    async def before_poster_loop(self):
        await self.bot.wait_until_ready()
        logger.info("Leaderboard scheduler is ready.")

    @commands.command(name="leaderboard", description="Posts the squad leaderboard now.", hidden=True)
    @commands.is_owner()
    async def leaderboard(self, ctx: commands.Context):
        async with ctx.typing():
            posted = await self.post_leaderboard()
        if posted:
            await ctx.reply("✅ Leaderboard posted.")
        else:
            await ctx.reply("⚠️ No leaderboard data available right now.")

    @commands.command(name="find_ids", description="Looks up the ids needed for a roster entry.", hidden=True)
    @commands.is_owner()
    async def find_ids(self, ctx: commands.Context, platform: str, *, name: str):
        try:
            platform_enum = PlatformEnum(platform.lower())
        except ValueError:
            choices = ", ".join(p.value for p in PlatformEnum)
            await ctx.reply(f"❌ Unknown platform `{platform}`. Use one of: {choices}")
            return

        ids = await lookup_player_ids(name, platform_enum.value)
        if ids is None:
            await ctx.reply("❌ Could not find ids. Make sure the name is exactly as it appears in-game.")
            return
        await ctx.reply(
            f"Found ids for **{ids['user_name']}**\n"
            f"```\nplayer_id: {ids['player_id']}\nuser_id:   {ids['user_id']}\n```"
        )

    @Cog.listener()
    async def on_ready(self):
        if not self.bot.__ready__:
            self.bot.cogs_ready.ready_up("leaderboard")


def setup(bot: "SquadStatsBot"):
    bot.add_cog(LeaderboardCog(bot))
    logger.debug("LeaderboardCog loaded successfully.")

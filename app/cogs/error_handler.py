from typing import TYPE_CHECKING

from discord.ext import commands

from app.logger import logger

if TYPE_CHECKING:
    from app.bot import SquadStatsBot


class ErrorHandler(commands.Cog):
    def __init__(self, bot: "SquadStatsBot"):
        self.bot = bot

    @commands.Cog.listener()
    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        if hasattr(ctx.command, "on_error"):
            return

        if isinstance(error, commands.CommandNotFound):
            return
        if isinstance(error, commands.NotOwner):
            await ctx.reply("❌ Sorry, only the bot owner can run this command.")
        elif isinstance(error, commands.MissingRequiredArgument):
            await ctx.reply(f"❌ Missing argument `{error.param.name}`.")
        elif isinstance(error, commands.BadArgument):
            await ctx.reply("❌ Invalid argument.")
        else:
            logger.error(f"Unhandled error in command {ctx.command}: {error}", exc_info=error)
            await ctx.reply("❌ This command is not available right now.")

    @commands.Cog.listener()
    async def on_ready(self):
        if not self.bot.__ready__:
            self.bot.cogs_ready.ready_up("error_handler")


def setup(bot: "SquadStatsBot"):
    bot.add_cog(ErrorHandler(bot))
    logger.debug("ErrorHandler loaded successfully.")

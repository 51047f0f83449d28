import asyncio
import sys
import traceback
from pathlib import Path
from typing import Optional

from discord import Activity, ActivityType, ExtensionFailed, Intents, Message, NoEntryPointError
from discord.abc import Messageable
from discord.ext.commands import Bot

from app.gametools.http_session import close_session
from app.interactions import InteractionsServer, InteractionVerifier
from app.leaderboard import StatsAggregator
from app.lib.settings import Settings
from app.logger import logger
from app.roster import DEFAULT_ROSTER, RosterRegistry

COGS_PATH = Path(__file__).resolve().parent.parent / "cogs"

prefix = "bf!"
COGS = [p.stem for p in COGS_PATH.glob("*.py")]


class Ready:
    """Keeps track of which cogs have finished loading."""

    def __init__(self):
        if not COGS:
            logger.warning("No cogs found to load")
        for cog in COGS:
            setattr(self, cog, False)

    def ready_up(self, cog: str):
        setattr(self, cog, True)
        logger.info(f"{cog} is ready")

    def all_ready(self) -> bool:
        if not COGS:
            return True
        return all(getattr(self, cog) for cog in COGS)


class SquadStatsBot(Bot):
    def __init__(self, settings: Optional[Settings] = None, roster: Optional[RosterRegistry] = None):
        self.settings = settings or Settings.from_env()
        intents = Intents.default() | Intents.message_content

        super().__init__(
            command_prefix=prefix,
            owner_ids=set(self.settings.owner_ids) or None,
            intents=intents
        )
        self.version = None
        self.token = self.settings.discord_token
        if roster is None:
            if self.settings.roster_file:
                roster = RosterRegistry.load(self.settings.roster_file)
            else:
                roster = RosterRegistry.from_mapping(DEFAULT_ROSTER)
        self.roster = roster
        self.aggregator = StatsAggregator(self.roster)
        self.interactions: Optional[InteractionsServer] = None
        if self.settings.public_key:
            self.interactions = InteractionsServer(
                InteractionVerifier(self.settings.public_key),
                self.settings.interactions_host,
                self.settings.interactions_port
            )
        else:
            logger.warning("PUBLIC_KEY not set, the interactions endpoint is disabled.")
        self.cogs_ready = Ready()
        self.__ready__ = False
        # the "test" command is registered for the HTTP endpoint, a gateway sync would wipe it
        self.auto_sync_commands = False

    def run(self, version: str):
        self.version = version
        logger.info("Starting Squad Stats Bot version %s", self.version)
        logger.info(f"Running setup . . .")
        self.setup_cogs()
        logger.info("Setup complete. Running bot . . .")
        super().run(self.token, reconnect=True)

    def setup_cogs(self):
        if not COGS:
            logger.warning("No cogs found to load, assuming all are ready.")
            self.__ready__ = True
            return
        for cog in COGS:
            try:
                logger.debug("Loading cog: %s", cog)
                self.load_extension(f"app.cogs.{cog}")
            except (NoEntryPointError, ExtensionFailed) as e:
                logger.error("Ignoring %s (load failed): %s", cog, e, exc_info=True)
                traceback.print_exception(type(e), e, e.__traceback__, file=sys.stderr)
            except Exception as e:
                logger.error("Ignoring %s (load failed): %s", cog, e, exc_info=True)
                traceback.print_exception(type(e), e, e.__traceback__, file=sys.stderr)
            else:
                logger.debug("Cog %s loaded successfully", cog)
                self.cogs_ready.ready_up(cog)

    async def on_connect(self):
        if self.interactions is not None and not self.interactions.running:
            try:
                await self.interactions.start()
            except OSError as e:
                logger.error(f"Could not start the interactions server: {e}", exc_info=True)
        logger.info(f"Bot {self.user} connected to Discord.")

    async def on_ready(self):
        if not self.__ready__:
            while not self.cogs_ready.all_ready():
                await asyncio.sleep(0.5)
            self.__ready__ = True
        logger.info(f"Squad Stats Bot is ready! Tracking {len(self.roster)} players.")
        await self.change_presence(activity=Activity(type=ActivityType.watching,
                                                     name=f"{len(self.roster)} soldiers |"))

    async def close(self):
        if self.interactions is not None:
            await self.interactions.stop()
        await close_session()
        await super().close()

    async def send_to_channel(self, channel_id: int, **content) -> Optional[Message]:
        """
        Sends a message to a channel, looking it up in the cache first and fetching it otherwise.
        :return: the sent message, or None if the channel could not be reached
        """
        channel = self.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.fetch_channel(channel_id)
            except Exception as e:
                logger.error(f"Failed to fetch channel {channel_id}: {e}", exc_info=True)
                return None
        if not isinstance(channel, Messageable):
            logger.error(f"Channel {channel_id} cannot receive messages.")
            return None
        try:
            return await channel.send(**content)
        except Exception as e:
            logger.error(f"Failed to send message to channel {channel_id}: {e}", exc_info=True)
            return None

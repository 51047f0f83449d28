from dotenv import load_dotenv
load_dotenv(".env")

import info
from app.bot import SquadStatsBot


if __name__ == "__main__":
    bot = SquadStatsBot()
    bot.run(info.__version__)

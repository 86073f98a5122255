"""
Bot entrypoint.

Operator notes:
- This file should remain extremely small and boring.
- All configuration validation happens inside run_bot().
- Anything that escapes run_bot() is fatal: logged, exit status 1.
"""

import logging
import sys

from topsync.discord.bot import run_bot


def main() -> None:
    try:
        run_bot()
    except SystemExit:
        raise
    except Exception:
        logging.getLogger("topsync").exception("Discord bot failed to start.")
        print("\n❌ Discord bot failed to start.")
        print("   See error above. Most common causes:")
        print("   - BOT_TOKEN missing or not loaded into the environment")
        print("   - APPLICATION_ID not matching the bot token")
        print("   - DISCORD_SYNC_GUILD_ONLY=true without DISCORD_GUILD_ID\n")
        sys.exit(1)


if __name__ == "__main__":
    main()

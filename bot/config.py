import os
import pytz
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Bot configuration settings"""

    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID', 0))
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # Comma-separated for multi-guild support
    OWNER_DISCORD_ID = int(os.getenv('OWNER_DISCORD_ID', 0))

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///connections.db')

    # Bot settings
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    # Leaderboard settings
    TIMEZONE = os.getenv('TIMEZONE', 'UTC')  # Calendar days and month boundaries are computed here
    ROTATION_CATCH_UP = os.getenv('ROTATION_CATCH_UP', 'True').lower() == 'true'
    SUBMISSION_MAX_RETRIES = int(os.getenv('SUBMISSION_MAX_RETRIES', 3))

    @classmethod
    def get_guild_ids(cls):
        """Get list of guild IDs for command syncing"""
        if cls.DISCORD_GUILD_IDS:
            # Multi-guild support: comma-separated IDs
            try:
                return [int(guild_id.strip()) for guild_id in cls.DISCORD_GUILD_IDS.split(',') if guild_id.strip()]
            except ValueError:
                raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")
        elif cls.DISCORD_GUILD_ID:
            return [cls.DISCORD_GUILD_ID]
        else:
            # Global sync
            return []

    @classmethod
    def get_async_database_url(cls) -> str:
        """Database URL with the async sqlite driver substituted in"""
        database_url = cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        try:
            pytz.timezone(cls.TIMEZONE)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"TIMEZONE '{cls.TIMEZONE}' is not a known timezone")
        if cls.SUBMISSION_MAX_RETRIES < 1:
            raise ValueError("SUBMISSION_MAX_RETRIES must be at least 1")

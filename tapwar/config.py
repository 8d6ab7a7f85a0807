import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Bot configuration settings"""
    
    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID') or 0)
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # Comma-separated for multi-guild support
    OWNER_DISCORD_ID = int(os.getenv('OWNER_DISCORD_ID') or 0)
    BATTLE_CHANNEL_ID = int(os.getenv('BATTLE_CHANNEL_ID') or 0)  # 0 disables hourly announcements
    
    # Local preference store
    DATABASE_URL = os.getenv('DATABASE_URL') or 'sqlite:///tapwar.db'
    
    # Backend (Supabase) settings
    SUPABASE_URL = (os.getenv('SUPABASE_URL') or '').rstrip('/')
    SUPABASE_ANON_KEY = os.getenv('SUPABASE_ANON_KEY')
    GEOLOCATION_URL = os.getenv('GEOLOCATION_URL') or 'https://ipapi.co/json/'
    HTTP_TIMEOUT_SECONDS = float(os.getenv('HTTP_TIMEOUT_SECONDS') or 10)
    
    # Bot settings
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')
    DEBUG = os.getenv('DEBUG', '').strip().lower() in ('1', 'true', 'yes')
    
    # Game settings
    TAP_BATCH_SIZE = int(os.getenv('TAP_BATCH_SIZE') or 10)  # Taps per submission
    LEADERBOARD_REFRESH_SECONDS = int(os.getenv('LEADERBOARD_REFRESH_SECONDS') or 5)
    LEADERBOARD_FETCH_LIMIT = 50
    LEADERBOARD_DISPLAY_LIMIT = 20
    BATTLE_LIVE_SECONDS = 10        # Live period at the top of each hour
    
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
    def get_rest_url(cls) -> str:
        """Base URL of the backend's REST interface"""
        return f"{cls.SUPABASE_URL}/rest/v1"
    
    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not cls.OWNER_DISCORD_ID:
            raise ValueError("OWNER_DISCORD_ID is required")
        if not cls.SUPABASE_URL:
            raise ValueError("SUPABASE_URL is required")
        if not cls.SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_ANON_KEY is required")
        if cls.TAP_BATCH_SIZE < 1:
            raise ValueError("TAP_BATCH_SIZE must be at least 1")
        if cls.LEADERBOARD_REFRESH_SECONDS < 1:
            raise ValueError("LEADERBOARD_REFRESH_SECONDS must be at least 1")

from sqlalchemy import Column, Integer, String, DateTime, BigInteger, CheckConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class PlayerPreference(Base):
    """Local preferences for one Discord user.
    
    The anonymous id is what the backend sees; the Discord id never leaves
    the bot.
    """
    __tablename__ = 'player_preferences'
    
    id = Column(Integer, primary_key=True)
    discord_id = Column(BigInteger, nullable=False, unique=True, index=True)
    anonymous_id = Column(String(36), nullable=False, unique=True)
    
    # Confirmed country
    country_code = Column(String(8), nullable=True)
    country_name = Column(String(100), nullable=True)
    detection_method = Column(String(10), nullable=True)  # "ip" or "manual"
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    
    # Lifetime counter, persisted every batch
    total_taps_all_time = Column(BigInteger, nullable=False, default=0)
    
    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    
    __table_args__ = (
        CheckConstraint('total_taps_all_time >= 0', name='ck_total_taps_non_negative'),
    )
    
    def __repr__(self):
        return f"<PlayerPreference(discord_id={self.discord_id}, country='{self.country_code}')>"

from sqlalchemy import Column, Integer, String, Text

from pos_bridge.database import Base


class ConfigEntry(Base):
    """Key/value configuration maintained from the admin panel (API tokens etc.)"""
    __tablename__ = "config_entries"

    id = Column(Integer, primary_key=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=True)

    def __repr__(self):
        return f"<ConfigEntry {self.key}>"

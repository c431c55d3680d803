from sqlalchemy import Column, String, Text, BigInteger
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoredSession(Base):
    """Server-side session row. The client only ever holds a signed reference to ``id``."""
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    data = Column(Text, nullable=False)  # JSON serialized SessionData
    expires_at = Column(BigInteger, nullable=False, index=True)  # epoch ms

    def __repr__(self):
        return f"<StoredSession(id='{self.id[:8]}...', expires_at={self.expires_at})>"

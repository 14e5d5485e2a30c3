from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Text, DateTime, Boolean, JSON, func, ForeignKey
from sqlalchemy.orm import relationship

class Base(DeclarativeBase):
    pass

class SkillSession(Base):
    __tablename__ = "skill_sessions"
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())

    turns = relationship("TurnRecord", back_populates="session")

class TurnRecord(Base):
    """Audit log of handled turns; never read back into a dialog."""
    __tablename__ = "turns"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(ForeignKey("skill_sessions.id"), index=True)
    request_id: Mapped[str] = mapped_column(String(128), default="")
    kind: Mapped[str] = mapped_column(String(32))
    intent: Mapped[str | None] = mapped_column(String(64), nullable=True)
    speech: Mapped[str] = mapped_column(Text, default="")
    ended: Mapped[bool] = mapped_column(Boolean, default=False)
    meta: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())

    session = relationship("SkillSession", back_populates="turns")

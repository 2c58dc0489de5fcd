"""ORM models for films, watchers, chats and the inbound message log."""


import enum
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import (
	DDL, Boolean, DateTime, Enum, Integer, BigInteger, String, Text, UniqueConstraint, Index, event
)
from sqlalchemy.orm import Mapped, mapped_column, declarative_base

Base = declarative_base()

def utcnow() -> datetime:
	return datetime.now(timezone.utc)

class ChatStatus(enum.Enum):
	IDLE = "idle"
	AWAITING_ADD_KEYWORDS = "awaiting_add_keywords"
	AWAITING_REMOVE_SELECTION = "awaiting_remove_selection"

class Film(Base):
	__tablename__ = "films"
	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	original_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
	name: Mapped[str] = mapped_column(String(256), nullable=False)
	original_name: Mapped[str] = mapped_column(String(256), nullable=False)
	link: Mapped[str] = mapped_column(String(512), nullable=False)
	poster_link: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

class Watcher(Base):
	__tablename__ = "watchers"
	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	chat_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
	keywords: Mapped[str] = mapped_column(String(512), nullable=False)
	keywords_normalised: Mapped[str] = mapped_column(String(512), nullable=False)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
	__table_args__ = (
		UniqueConstraint("chat_id", "keywords_normalised", name="uq_watcher_chat_keywords"),
	)

class Chat(Base):
	__tablename__ = "chats"
	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	chat_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
	user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
	status: Mapped[ChatStatus] = mapped_column(
		Enum(ChatStatus, native_enum=False, length=32), default=ChatStatus.IDLE, nullable=False
	)
	subscribed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
	updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
	__table_args__ = (
		UniqueConstraint("chat_id", "user_id", name="uq_chat_user"),
		Index("ix_chats_chat_id", "chat_id"),
	)

class Message(Base):
	__tablename__ = "messages"
	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	message_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
	from_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
	from_first_name: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
	chat_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
	chat_first_name: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
	text: Mapped[str] = mapped_column(Text, nullable=False, default="")
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


# Full-text index over watchers. External content table, kept in sync by triggers.
# remove_diacritics 0 keeps "ă" and "a" distinct, like the normalizer does.
_FTS_DDL = [
	"""
	CREATE VIRTUAL TABLE IF NOT EXISTS watchers_fts USING fts5(
		keywords_normalised,
		chat_id UNINDEXED,
		content='watchers',
		content_rowid='id',
		tokenize='unicode61 remove_diacritics 0'
	)
	""",
	"""
	CREATE TRIGGER IF NOT EXISTS watchers_fts_ai AFTER INSERT ON watchers BEGIN
		INSERT INTO watchers_fts(rowid, keywords_normalised, chat_id)
		VALUES (new.id, new.keywords_normalised, new.chat_id);
	END
	""",
	"""
	CREATE TRIGGER IF NOT EXISTS watchers_fts_ad AFTER DELETE ON watchers BEGIN
		INSERT INTO watchers_fts(watchers_fts, rowid, keywords_normalised, chat_id)
		VALUES ('delete', old.id, old.keywords_normalised, old.chat_id);
	END
	""",
]

for _statement in _FTS_DDL:
	event.listen(Watcher.__table__, "after_create", DDL(_statement).execute_if(dialect="sqlite"))

event.listen(
	Watcher.__table__, "before_drop", DDL("DROP TABLE IF EXISTS watchers_fts").execute_if(dialect="sqlite")
)

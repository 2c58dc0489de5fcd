"""Store operations for films, watchers, chats and messages.

Functions here never commit on their own: callers own the transaction and
finish it with ``commit``. Every SQLAlchemy failure is rolled back and
re-raised as ``PersistenceError``.
"""

import functools
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, TypeVar
from sqlalchemy import Integer, cast, delete, func, select, text, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from matheque.core.errors import PersistenceError
from matheque.ingestion.normalizer import normalize
from .models import Chat, ChatStatus, Film, Message, Watcher

T = TypeVar("T")

_MATCH_WATCHERS_SQL = text(
	"""
	SELECT chat_id, MIN(rank) AS best_rank
	FROM watchers_fts
	WHERE watchers_fts MATCH :query
	GROUP BY chat_id
	ORDER BY best_rank
	"""
)

def _persistence(func: Callable[..., T]) -> Callable[..., T]:
	@functools.wraps(func)
	def wrapper(db: Session, *args, **kwargs) -> T:
		try:
			return func(db, *args, **kwargs)
		except SQLAlchemyError as e:
			db.rollback()
			raise PersistenceError(f"{func.__name__} failed: {e}") from e
	return wrapper

@_persistence
def commit(db: Session) -> None:
	"""Commit the current transaction."""
	db.commit()

@_persistence
def film_exists(db: Session, original_id: str) -> bool:
	"""Check whether a film with this external id is already stored."""
	q = select(Film.id).where(Film.original_id == original_id)
	return db.execute(q).first() is not None

@_persistence
def insert_film(
	db: Session, original_id: str, name: str, original_name: str, link: str, poster_link: Optional[str]
) -> Film:
	"""Add a newly discovered film."""
	film = Film(
		original_id=original_id,
		name=name,
		original_name=original_name,
		link=link,
		poster_link=poster_link,
		created_at=datetime.now(timezone.utc),
	)
	db.add(film)
	db.flush()
	return film

@_persistence
def insert_message(
	db: Session,
	message_id: int,
	from_id: int,
	from_first_name: Optional[str],
	chat_id: int,
	chat_first_name: Optional[str],
	text: str,
) -> Message:
	"""Append an inbound message to the audit log."""
	message = Message(
		message_id=message_id,
		from_id=from_id,
		from_first_name=from_first_name,
		chat_id=chat_id,
		chat_first_name=chat_first_name,
		text=text,
		created_at=datetime.now(timezone.utc),
	)
	db.add(message)
	db.flush()
	return message

@_persistence
def get_chat_status(db: Session, chat_id: int, user_id: int) -> ChatStatus:
	"""Return the conversation status, IDLE for a chat never seen before."""
	q = select(Chat.status).where(Chat.chat_id == chat_id, Chat.user_id == user_id)
	status = db.scalars(q).first()
	return status if status is not None else ChatStatus.IDLE

@_persistence
def set_chat_status(db: Session, chat_id: int, user_id: int, status: ChatStatus) -> None:
	"""Insert or update the chat row for (chat_id, user_id) with the given status."""
	now = datetime.now(timezone.utc)
	stmt = sqlite_insert(Chat).values(
		chat_id=chat_id,
		user_id=user_id,
		status=status,
		subscribed=True,
		created_at=now,
		updated_at=now,
	)
	stmt = stmt.on_conflict_do_update(
		index_elements=[Chat.chat_id, Chat.user_id],
		set_={"status": status, "updated_at": now},
	)
	db.execute(stmt)

@_persistence
def set_subscribed(db: Session, chat_id: int, user_id: int, subscribed: bool) -> int:
	"""Toggle the subscription flag on an existing chat row. Returns rows affected."""
	result = db.execute(
		update(Chat)
		.where(Chat.chat_id == chat_id, Chat.user_id == user_id)
		.values(subscribed=subscribed, updated_at=datetime.now(timezone.utc))
	)
	return result.rowcount

@_persistence
def filter_subscribed(db: Session, chat_ids: Iterable[int]) -> List[int]:
	"""
	Drop chats that have unsubscribed, keeping the input order.

	A chat counts as unsubscribed when it has chat rows and none of them is
	subscribed. Chats without any row are kept.
	"""
	chat_ids = list(chat_ids)
	if not chat_ids:
		return []
	q = (
		select(Chat.chat_id)
		.where(Chat.chat_id.in_(chat_ids))
		.group_by(Chat.chat_id)
		.having(func.max(cast(Chat.subscribed, Integer)) == 0)
	)
	unsubscribed = set(db.scalars(q))
	return [chat_id for chat_id in chat_ids if chat_id not in unsubscribed]

@_persistence
def insert_watcher(db: Session, chat_id: int, keywords: str) -> Optional[Watcher]:
	"""
	Add a watcher unless the chat already has one with the same normalized keywords.

	Returns:
		The new watcher, or None when the keywords hold no word or are already watched
	"""
	keywords = keywords.strip(" ")
	normalised = normalize(keywords)
	# Symbols such as "×" survive normalization but are separators to the full-text index
	if not any(char.isalpha() for char in normalised):
		return None

	q = select(Watcher.id).where(Watcher.chat_id == chat_id, Watcher.keywords_normalised == normalised)
	if db.execute(q).first() is not None:
		return None

	watcher = Watcher(
		chat_id=chat_id,
		keywords=keywords,
		keywords_normalised=normalised,
		created_at=datetime.now(timezone.utc),
	)
	db.add(watcher)
	db.flush()
	return watcher

@_persistence
def remove_watcher(db: Session, chat_id: int, keywords: str) -> bool:
	"""Remove the chat's watcher matching the keywords case-insensitively. Returns True if one was removed."""
	normalised = normalize(keywords.strip(" "))
	if not normalised.strip():
		return False
	result = db.execute(
		delete(Watcher).where(Watcher.chat_id == chat_id, Watcher.keywords_normalised == normalised)
	)
	return result.rowcount > 0

@_persistence
def list_watchers(db: Session, chat_id: int) -> List[str]:
	"""List a chat's watcher keywords, alphabetically ignoring case."""
	q = select(Watcher.keywords).where(Watcher.chat_id == chat_id).order_by(func.lower(Watcher.keywords))
	return list(db.scalars(q))

@_persistence
def match_watchers(db: Session, tokens: Iterable[str]) -> List[int]:
	"""
	Find chats with at least one watcher containing any of the tokens.

	Args:
		db: Database session
		tokens: Normalized tokens (letters only)

	Returns:
		Distinct chat ids, best full-text rank first
	"""
	query = build_match_query(tokens)
	if not query:
		return []
	rows = db.execute(_MATCH_WATCHERS_SQL, {"query": query})
	return [row.chat_id for row in rows]

def build_match_query(tokens: Iterable[str]) -> str:
	"""Join tokens into an FTS5 OR query, each token quoted so it is never read as an operator."""
	quoted = ['"' + token.replace('"', '""') + '"' for token in tokens if token]
	return " OR ".join(quoted)

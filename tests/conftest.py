# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("FEED_CACHE_BACKEND", "none")

from babel_board.api.v1.dependencies import get_feed_cache_dep  # noqa: E402
from babel_board.core.security import create_access_token  # noqa: E402
from babel_board.db.session import Base  # noqa: E402
from babel_board.db.session import get_db as app_get_session  # noqa: E402
from babel_board.db.time import utcnow  # noqa: E402
from babel_board.main import app as fastapi_app  # noqa: E402
from babel_board.models import ROLE_MODERATOR, Comment, Post, User, UserStanding  # noqa: E402
from babel_board.services.feed_cache import MemoryFeedCache  # noqa: E402

TEST_DB_URL = "sqlite://"

_USERNAME_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def feed_cache() -> MemoryFeedCache:
    """Fresh in-memory ranked feed cache for each test."""
    return MemoryFeedCache()


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    feed_cache: MemoryFeedCache,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_feed_cache_dep] = lambda: feed_cache
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_feed_cache_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory creating persisted users with a standing row."""

    def _make(username: str | None = None, *, role: str | None = None, **standing: object) -> User:
        user = User(username=username or f"user{next(_USERNAME_COUNTER)}")
        user.standing = UserStanding(role=role or "user", **standing)
        db_session.add(user)
        db_session.flush()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary test user."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second user."""
    return make_user("bob")


@pytest.fixture()
def moderator(make_user: Callable[..., User]) -> User:
    return make_user("mod", role=ROLE_MODERATOR)


def _bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building authorization headers for any user."""
    return _bearer


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return _bearer(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return _bearer(other_user)


@pytest.fixture()
def make_post(db_session: Session, test_user: User) -> Callable[..., Post]:
    """Return a factory creating posts; ``age`` backdates ``created_at``."""

    def _make(
        title: str = "Test post",
        *,
        author: User | None = None,
        votes: int = 0,
        age: timedelta = timedelta(minutes=1),
        created_at: datetime | None = None,
        **fields: object,
    ) -> Post:
        stamp = created_at or utcnow() - age
        post = Post(
            title=title,
            author_id=(author or test_user).id,
            votes=votes,
            created_at=stamp,
            updated_at=stamp,
            **fields,
        )
        db_session.add(post)
        db_session.flush()
        db_session.refresh(post)
        return post

    return _make


@pytest.fixture()
def test_post(make_post: Callable[..., Post]) -> Post:
    """Create a baseline post for tests."""
    return make_post("Test post content")


@pytest.fixture()
def make_comment(db_session: Session, test_user: User) -> Callable[..., Comment]:
    """Return a factory creating comments directly, without counter bookkeeping."""

    def _make(
        post: Post,
        text: str = "A comment",
        *,
        author: User | None = None,
        parent: Comment | None = None,
        age: timedelta = timedelta(minutes=1),
        **fields: object,
    ) -> Comment:
        stamp = utcnow() - age
        comment = Comment(
            post_id=post.id,
            parent_id=parent.id if parent else None,
            author_id=(author or test_user).id,
            text=text,
            created_at=stamp,
            updated_at=stamp,
            **fields,
        )
        db_session.add(comment)
        db_session.flush()
        db_session.refresh(comment)
        return comment

    return _make

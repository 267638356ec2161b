"""SQLAlchemy database models for the Brain MCP server."""
from sqlalchemy import (JSON, Column, DateTime, ForeignKey, Integer, String,
                        Table, Text, create_engine, event)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from brain_mcp.models.schema import DEFAULT_LINK_TYPE, utc_now

# Create base class for SQLAlchemy models
Base = declarative_base()

# Association table for tags and resources
resource_tags = Table(
    "resource_tags",
    Base.metadata,
    Column(
        "resource_id",
        String(64),
        ForeignKey("resources.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class DBResource(Base):
    """Database model for a resource (note, file, link or task)."""
    __tablename__ = "resources"
    id = Column(String(64), primary_key=True)
    resource_type = Column("type", String(16), nullable=False, index=True)
    # Nullable for non-file resources; looked up on every scan
    path = Column(Text, nullable=True, index=True)
    title = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, nullable=False, index=True)
    extra_metadata = Column(JSON(none_as_null=True), nullable=True)

    # Relationships; deletes are left to ON DELETE CASCADE in SQLite
    tags = relationship(
        "DBTag", secondary=resource_tags, back_populates="resources",
        passive_deletes=True,
    )
    outgoing_links = relationship(
        "DBLink",
        foreign_keys="DBLink.source_id",
        back_populates="source",
        passive_deletes=True,
    )
    incoming_links = relationship(
        "DBLink",
        foreign_keys="DBLink.target_id",
        back_populates="target",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """Return string representation of resource."""
        return (
            f"<Resource(id='{self.id}', type='{self.resource_type}', "
            f"title='{self.title}')>"
        )


class DBTag(Base):
    """Database model for a tag."""
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)

    # Relationships
    resources = relationship(
        "DBResource", secondary=resource_tags, back_populates="tags",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """Return string representation of tag."""
        return f"<Tag(id={self.id}, name='{self.name}')>"


class DBLink(Base):
    """Database model for a directed link between resources.

    The primary key is the ordered pair, so at most one edge of any type
    exists from a given source to a given target.
    """
    __tablename__ = "links"
    source_id = Column(
        String(64),
        ForeignKey("resources.id", ondelete="CASCADE"),
        primary_key=True,
    )
    target_id = Column(
        String(64),
        ForeignKey("resources.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    link_type = Column("type", String(50), default=DEFAULT_LINK_TYPE, nullable=True)

    # Relationships
    source = relationship(
        "DBResource", foreign_keys=[source_id], back_populates="outgoing_links"
    )
    target = relationship(
        "DBResource", foreign_keys=[target_id], back_populates="incoming_links"
    )

    def __repr__(self) -> str:
        """Return string representation of link."""
        return (
            f"<Link(source='{self.source_id}', "
            f"target='{self.target_id}', type='{self.link_type}')>"
        )


def create_db_engine(url: str) -> Engine:
    """Create the single-connection engine used by the storage layer.

    StaticPool keeps exactly one DBAPI connection for the life of the
    engine. check_same_thread is off because access is serialized by
    the Database lock rather than by thread affinity.
    """
    engine = create_engine(
        url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        # Enforce FK constraints so deletes cascade to links and tags
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet.

    Idempotent and never destructive: existing tables and rows are left
    untouched, so this runs on every startup.
    """
    Base.metadata.create_all(engine)


def get_session_factory(engine: Engine):
    """Get a session factory for the database."""
    return sessionmaker(bind=engine, expire_on_commit=False)

"""
SQLAlchemy models for the vhd catalog database.

Column names follow the historical ``catalog.db`` layout (``driveId``,
``parentId``, ``directoryId``, ``uuid``) so existing catalogs open as is.
Timestamps are stored as Unix epochs.
"""

from sqlalchemy import Column, Integer, String, Text, Index
from sqlalchemy.ext.declarative import declarative_base

Base = declarative_base()


class Drive(Base):
    """A configured drive and where its blobs live."""
    __tablename__ = 'drives'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), unique=True, nullable=False)
    description = Column(Text, default='')
    kind = Column('host', String(50), nullable=False)  # local, gcs
    location = Column('address', String(1000), nullable=False)  # folder or bucket

    def __repr__(self):
        return f"<Drive(id={self.id}, name='{self.name}', kind='{self.kind}')>"


class Directory(Base):
    """A folder; parent_id is -1 for folders directly under the drive."""
    __tablename__ = 'directories'

    id = Column(Integer, primary_key=True)
    drive_id = Column('driveId', Integer, nullable=False)
    name = Column(String(500), nullable=False)
    parent_id = Column('parentId', Integer, nullable=False)

    __table_args__ = (
        Index('idx_directories_drive', 'driveId'),
        Index('idx_directories_parent', 'parentId'),
    )

    def __repr__(self):
        return f"<Directory(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"


class File(Base):
    """A file; content_id names its blob in the drive's storage."""
    __tablename__ = 'files'

    id = Column(Integer, primary_key=True)
    drive_id = Column('driveId', Integer, nullable=False)
    name = Column(String(500), nullable=False)
    directory_id = Column('directoryId', Integer, nullable=False)
    content_id = Column('uuid', String(64), nullable=False)
    created = Column(Integer, nullable=False)
    updated = Column(Integer, nullable=False)
    meta = Column('metadata', Text, default='')

    __table_args__ = (
        Index('idx_files_drive', 'driveId'),
        Index('idx_files_directory', 'directoryId'),
    )

    def __repr__(self):
        return f"<File(id={self.id}, name='{self.name}', content_id='{self.content_id}')>"

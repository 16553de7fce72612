"""
SQLite catalog backed by SQLAlchemy.

All drives share one database file (``catalog.db`` in the config folder).
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from sqlalchemy import create_engine, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import aliased, sessionmaker

from vhd.catalog.base import Catalog, DirectoryRecord, DriveRecord, FileRecord
from vhd.catalog.models import Base, Directory, Drive, File
from vhd.errors import CatalogError

logger = logging.getLogger(__name__)


def _epoch(timestamp: datetime) -> int:
    return int(timestamp.timestamp())


class SQLCatalog(Catalog):
    """Catalog stored in a SQLite database."""

    def __init__(self, db_path: Path, echo: bool = False):
        """
        Open (and create if needed) the catalog database.

        Args:
            db_path: Path to the SQLite file
            echo: If True, log all SQL statements (debug mode)

        Raises:
            CatalogError: The database could not be opened or initialized
        """
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._engine = create_engine(f'sqlite:///{self.db_path}', echo=echo)
            Base.metadata.create_all(self._engine)
        except (OSError, SQLAlchemyError) as e:
            raise CatalogError(f"cannot open catalog {self.db_path}: {e}") from e
        self._session_factory = sessionmaker(bind=self._engine)
        logger.debug(f"Opened catalog database {self.db_path}")

    @contextmanager
    def session_scope(self):
        """
        Provide a transactional scope around a series of operations.

        Commits on success and rolls back on failure. Database errors are
        raised as CatalogError.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except (SQLAlchemyError, UnicodeError) as e:
            session.rollback()
            raise CatalogError(f"catalog database error: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self._engine.dispose()

    # Drives

    def fetch_drives(self) -> List[DriveRecord]:
        with self.session_scope() as session:
            return [
                DriveRecord(d.id, d.name, d.kind, d.location, d.description or '')
                for d in session.query(Drive).order_by(Drive.name)
            ]

    def add_drive(
        self,
        name: str,
        kind: str,
        location: str,
        description: str = "",
    ) -> DriveRecord:
        with self.session_scope() as session:
            if session.query(Drive).filter_by(name=name).first() is not None:
                raise CatalogError(f"drive {name} already exists")
            drive = Drive(name=name, kind=kind, location=location, description=description)
            session.add(drive)
            session.flush()
            return DriveRecord(drive.id, name, kind, location, description)

    # Reading

    def fetch_directories(self, drive_id: int) -> Dict[int, DirectoryRecord]:
        with self.session_scope() as session:
            return {
                d.id: DirectoryRecord(d.id, d.name, d.parent_id)
                for d in session.query(Directory).filter(Directory.drive_id == drive_id)
            }

    def fetch_files(self, drive_id: int) -> Dict[int, FileRecord]:
        with self.session_scope() as session:
            return {
                f.id: FileRecord(
                    id=f.id,
                    name=f.name,
                    directory_id=f.directory_id,
                    content_id=f.content_id,
                    created=datetime.fromtimestamp(f.created),
                    updated=datetime.fromtimestamp(f.updated),
                    metadata=f.meta or '',
                )
                for f in session.query(File).filter(File.drive_id == drive_id)
            }

    def count_files_under(self, directory_id: int) -> int:
        with self.session_scope() as session:
            subfolders = (
                session.query(Directory.id)
                .filter(Directory.parent_id == directory_id)
                .cte(name='subfolders', recursive=True)
            )
            parent = aliased(subfolders, name='parent')
            child = aliased(Directory, name='child')
            subfolders = subfolders.union_all(
                session.query(child.id).filter(child.parent_id == parent.c.id)
            )
            return session.query(func.count(File.id)).filter(
                or_(
                    File.directory_id == directory_id,
                    File.directory_id.in_(select(subfolders.c.id)),
                )
            ).scalar()

    def count_files_in_drive(self, drive_id: int) -> int:
        with self.session_scope() as session:
            return session.query(func.count(File.id)).filter(
                File.drive_id == drive_id
            ).scalar()

    # Writing

    def create_directory(self, drive_id: int, name: str, parent_id: int) -> int:
        with self.session_scope() as session:
            directory = Directory(drive_id=drive_id, name=name, parent_id=parent_id)
            session.add(directory)
            session.flush()
            return directory.id

    def create_file(
        self,
        drive_id: int,
        name: str,
        content_id: str,
        directory_id: int,
        created: datetime,
        updated: datetime,
        metadata: str,
    ) -> int:
        with self.session_scope() as session:
            file = File(
                drive_id=drive_id,
                name=name,
                directory_id=directory_id,
                content_id=content_id,
                created=_epoch(created),
                updated=_epoch(updated),
                meta=metadata,
            )
            session.add(file)
            session.flush()
            return file.id

    def update_directory(self, directory_id: int, name: str, parent_id: int) -> None:
        with self.session_scope() as session:
            directory = session.query(Directory).filter_by(id=directory_id).first()
            if directory is None:
                raise CatalogError(f"unknown directory id {directory_id}")
            directory.name = name
            directory.parent_id = parent_id

    def update_file(
        self,
        file_id: int,
        name: str,
        directory_id: int,
        updated: Optional[datetime] = None,
    ) -> None:
        with self.session_scope() as session:
            file = session.query(File).filter_by(id=file_id).first()
            if file is None:
                raise CatalogError(f"unknown file id {file_id}")
            file.name = name
            file.directory_id = directory_id
            if updated is not None:
                file.updated = _epoch(updated)

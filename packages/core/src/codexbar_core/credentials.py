"""
Credential store adapters.

Three kinds of local stores hold provider credentials:
- JSON documents at fixed paths under the home directory
- a key/value table inside an editor's embedded SQLite database
- a trusted external helper command that prints a token

Every adapter reports a missing or unreadable record by raising
NoCredentialsError. Nothing here is fatal for the whole report.
"""

import asyncio
import json
import os
import sqlite3
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from .exceptions import NoCredentialsError
from .logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class OAuthCredentials:
    """
    An OAuth token pair with its absolute expiry.

    ``extra`` carries the rest of the stored record so that a rewrite
    after refresh keeps fields this program does not interpret.
    """

    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = None  # Unix seconds
    extra: dict[str, Any] = field(default_factory=dict)

    def refreshed(
        self,
        access_token: str,
        refresh_token: str | None,
        expires_at: float,
        **extra: Any,
    ) -> "OAuthCredentials":
        """Return a new record with the refreshed fields applied."""
        return replace(
            self,
            access_token=access_token,
            refresh_token=refresh_token or self.refresh_token,
            expires_at=expires_at,
            extra={**self.extra, **extra},
        )


class JSONFileStore:
    """A JSON document on disk, rewritten atomically."""

    def __init__(self, path: Path):
        self.path = Path(path)

    async def read(self) -> dict[str, Any]:
        """Read and parse the document."""
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
            data = json.loads(raw)
        except (OSError, ValueError) as e:
            logger.debug("Credential file unreadable", path=str(self.path), error=str(e))
            raise NoCredentialsError("No credentials found", cause=e) from e

        if not isinstance(data, dict):
            raise NoCredentialsError("No credentials found", context={"path": str(self.path)})
        return data

    async def write(self, document: dict[str, Any], indent: int = 2) -> None:
        """
        Replace the document on disk.

        The new content goes to a sibling temp file first and is renamed
        over the original, so readers never observe a partial write.
        """
        tmp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(document, indent=indent))
            try:
                mode = (await aiofiles.os.stat(self.path)).st_mode & 0o777
            except OSError:
                mode = 0o600
            os.chmod(tmp_path, mode)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise
        logger.debug("Credential file rewritten", path=str(self.path))


class SQLiteKeyValueStore:
    """
    A key/value table inside an SQLite database (VS Code style ``ItemTable``).

    The database is opened read-only for each lookup and closed again
    before returning, so no connection is held between calls.
    """

    def __init__(self, db_path: Path, table: str = "ItemTable"):
        self.db_path = Path(db_path)
        self.table = table

    def _get_sync(self, key: str) -> str | None:
        if not self.db_path.exists():
            return None

        conn = sqlite3.connect(f"{self.db_path.as_uri()}?mode=ro", uri=True)
        try:
            row = conn.execute(
                f"SELECT value FROM {self.table} WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()

        if row is None or row[0] is None:
            return None
        value = row[0]
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def get(self, key: str) -> str | None:
        """Look up one key. Missing database, table or key yields None."""
        try:
            return await asyncio.to_thread(self._get_sync, key)
        except (sqlite3.Error, UnicodeDecodeError) as e:
            logger.debug("SQLite lookup failed", db=str(self.db_path), key=key, error=str(e))
            return None

    async def require(self, key: str, message: str) -> str:
        """Look up one key, raising NoCredentialsError when it is absent."""
        value = await self.get(key)
        if not value:
            raise NoCredentialsError(message, context={"key": key})
        return value


class CommandTokenStore:
    """A token printed on stdout by a trusted helper command."""

    def __init__(self, argv: list[str]):
        self.argv = list(argv)

    async def load(self, message: str = "No credentials found") -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, _ = await process.communicate()
        except OSError as e:
            logger.debug("Credential helper not runnable", command=self.argv[0], error=str(e))
            raise NoCredentialsError(message, cause=e) from e

        token = stdout.decode(errors="replace").strip()
        if process.returncode != 0 or not token:
            logger.debug(
                "Credential helper returned no token",
                command=self.argv[0],
                returncode=process.returncode,
            )
            raise NoCredentialsError(message, context={"returncode": process.returncode})
        return token

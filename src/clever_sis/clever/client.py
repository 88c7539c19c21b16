"""
Async wrapper around paramiko for the Clever SFTP drop.

paramiko is synchronous; each public method runs its whole session in the
thread pool executor so it doesn't block the asyncio event loop.

Every operation opens its own session (connect → work → close). There is no
pooling and no retry. session() guarantees that the SFTP channel and the
transport are closed on every exit path, including failures.
"""
import asyncio
import logging
import posixpath
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List

import paramiko

from clever_sis.config import Settings
from clever_sis.errors import TransferError

logger = logging.getLogger(__name__)

# Failures raised by paramiko/socket during connect, auth, list, get or put
_TRANSFER_FAILURES = (paramiko.SSHException, OSError, EOFError)


class SftpClient:
    """
    Thin async wrapper over paramiko.SFTPClient.

    Usage:
        client = SftpClient.from_settings(get_settings())
        await client.test_connection()
        names = await client.upload({"students": Path("data/csv/students.csv")})
    """

    def __init__(
        self,
        host: str,
        port: int = 22,
        username: str = "",
        password: str = "",
        remote_dir: str = "/",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.remote_dir = remote_dir or "/"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SftpClient":
        return cls(
            host=settings.sftp_host,
            port=settings.sftp_port,
            username=settings.sftp_username,
            password=settings.sftp_password,
            remote_dir=settings.sftp_remote_dir,
        )

    # ── Session ───────────────────────────────────────────────────────────────

    @contextmanager
    def session(self) -> Iterator[paramiko.SFTPClient]:
        """
        One transfer session.

        Raises:
            TransferError: wrapping any connect/auth/transfer failure.
        """
        transport = None
        sftp = None
        try:
            transport = paramiko.Transport((self.host, self.port))
            transport.connect(username=self.username, password=self.password)
            sftp = paramiko.SFTPClient.from_transport(transport)
            if sftp is None:
                raise TransferError("Could not open SFTP channel")
            yield sftp
        except _TRANSFER_FAILURES as exc:
            raise TransferError(str(exc) or exc.__class__.__name__) from exc
        finally:
            if sftp is not None:
                sftp.close()
            if transport is not None:
                transport.close()

    async def _run(self, fn, *args):
        """Run a blocking session function in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args))

    # ── Operations ────────────────────────────────────────────────────────────

    async def test_connection(self) -> None:
        """Open and close a session. Raises TransferError on failure."""
        await self._run(self._test_connection_sync)

    def _test_connection_sync(self) -> None:
        with self.session():
            logger.info("SFTP connection to %s:%s OK", self.host, self.port)

    async def upload(self, files: Dict[str, Path]) -> List[str]:
        """
        Upload each local file as <remote_dir>/<name>.csv.

        Args:
            files: logical name → local path, e.g. {"students": Path(...)}.

        Returns:
            The logical names uploaded, in order.
        """
        return await self._run(self._upload_sync, files)

    def _upload_sync(self, files: Dict[str, Path]) -> List[str]:
        uploaded = []
        with self.session() as sftp:
            for name, local_path in files.items():
                remote_path = posixpath.join(self.remote_dir, f"{name}.csv")
                sftp.put(str(local_path), remote_path)
                logger.info("Uploaded %s → %s", local_path, remote_path)
                uploaded.append(name)
        return uploaded

    async def download(self, dest_dir: Path) -> List[str]:
        """
        Fetch every *.csv in the remote directory to dest_dir/downloaded_<name>.

        Existing local copies are overwritten.

        Returns:
            The remote file names downloaded.
        """
        return await self._run(self._download_sync, Path(dest_dir))

    def _download_sync(self, dest_dir: Path) -> List[str]:
        dest_dir.mkdir(parents=True, exist_ok=True)
        downloaded = []
        with self.session() as sftp:
            for attr in sftp.listdir_attr(self.remote_dir):
                name = attr.filename
                if not name.endswith(".csv"):
                    continue
                local_path = dest_dir / f"downloaded_{name}"
                sftp.get(posixpath.join(self.remote_dir, name), str(local_path))
                logger.info("Downloaded %s → %s", name, local_path)
                downloaded.append(name)
        return downloaded

"""WhatsApp transport — text bridge via wacli.

Inbound: a long-running `wacli sync --follow` process keeps the WhatsApp
session alive and writes new messages into wacli's local SQLite store; a
poller reads rows newer than the last seen rowid and emits them as
`message` events, one at a time.

Outbound: `wacli send text`. wacli holds an exclusive lock on its store
while syncing, so sends pause sync, send, then resume.

Requires: wacli binary installed and authenticated (`relaybot auth`).
"""

import asyncio
import logging
import os
import shutil
import sqlite3
from typing import Optional

from .base import Transport, TransportInfo
from ..communication.errors import SendError
from ..communication.inbound import DIRECT_SUFFIX, GROUP_SUFFIX, InboundMessage, normalize_recipient
from ..communication.outbound import clean_text, preview, split_message

logger = logging.getLogger("relaybot.whatsapp")

_WACLI_INSTALL_DIR = os.path.expanduser("~/.local/bin")
_WACLI_HOME = os.path.expanduser("~/.wacli")

_WA_USER_DOMAIN = "s.whatsapp.net"
_MAX_MESSAGE_LENGTH = 4096

_POLL_INTERVAL = 2.0    # seconds between inbound polls
_RESTART_DELAY = 5.0    # seconds before restarting a dead sync process
_SEND_TIMEOUT = 30      # seconds per `wacli send text`
_DEDUP_MAX = 5000       # max remembered rowids before prune


class WhatsAppTransport(Transport):
    """WhatsApp transport using the wacli subprocess."""

    name = "whatsapp"

    def __init__(
        self,
        wacli_path: Optional[str] = None,
        bot_number: Optional[str] = None,
        wacli_home: str = _WACLI_HOME,
        poll_interval: float = _POLL_INTERVAL,
    ):
        super().__init__()
        self._configured_path = wacli_path
        self._wacli_path = wacli_path or "wacli"
        self._bot_number = bot_number
        self._home = wacli_home
        self._poll_interval = poll_interval
        self._wacli_db: Optional[str] = None
        self._session_db: Optional[str] = None
        self._process: Optional[asyncio.subprocess.Process] = None
        self._monitor_task: Optional[asyncio.Task] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._last_rowid: int = 0
        self._running = False
        self._send_lock = asyncio.Lock()
        self._seen_rowids: set[int] = set()
        self._lid_to_pn_cache: dict[str, str] = {}

    # ── Binary ─────────────────────────────────────────────────

    async def resolve_wacli(self) -> Optional[str]:
        """Find the wacli binary — configured path, PATH, then Go binary dirs.

        Returns full path if found, None otherwise.
        """
        # 1. Explicit configuration
        configured = self._configured_path
        if configured and os.path.isfile(configured) and os.access(configured, os.X_OK):
            return configured

        # 2. PATH
        found = shutil.which("wacli")
        if found:
            return found

        # 3. Go binary dirs
        gopaths = set()
        env_gopath = os.environ.get("GOPATH", "").strip()
        if env_gopath:
            gopaths.add(env_gopath)

        if shutil.which("go"):
            try:
                proc = await asyncio.create_subprocess_exec(
                    "go", "env", "GOPATH",
                    stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE,
                )
                out, _ = await asyncio.wait_for(proc.communicate(), timeout=5)
                val = out.decode().strip()
                if val:
                    gopaths.add(val)
            except (OSError, asyncio.TimeoutError) as e:
                logger.debug(f"`go env GOPATH` failed: {e}")

        # Go default: ~/go (used when GOPATH is not set at all)
        gopaths.add(os.path.expanduser("~/go"))

        candidates = [os.path.join(_WACLI_INSTALL_DIR, "wacli")]
        for gp in sorted(gopaths):
            candidates.append(os.path.join(gp, "bin", "wacli"))

        for candidate in candidates:
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                return candidate

        return None

    def has_session(self) -> bool:
        """True once `wacli auth` has linked a WhatsApp account."""
        return os.path.isfile(os.path.join(self._home, "session.db"))

    # ── Addresses ──────────────────────────────────────────────

    def to_address(self, jid: str) -> str:
        """Map a wacli JID to a relay address.

        628xx:51@s.whatsapp.net -> 628xx@c.us
        123@lid                 -> <phone>@c.us when the session knows it
        456@g.us                -> 456@g.us
        """
        local, _, domain = (jid or "").partition("@")
        local = local.split(":", 1)[0]
        if domain == _WA_USER_DOMAIN:
            return f"{local}{DIRECT_SUFFIX}"
        if domain == "lid":
            pn = self._lookup_pn_from_lid(local)
            return f"{pn}{DIRECT_SUFFIX}" if pn else f"{local}@lid"
        if not domain:
            return local
        return f"{local}@{domain}"

    @staticmethod
    def to_jid(address: str) -> str:
        """Map a relay address back to a wacli JID."""
        address = address.strip()
        if address.endswith(DIRECT_SUFFIX):
            return f"{address[:-len(DIRECT_SUFFIX)]}@{_WA_USER_DOMAIN}"
        if "@" in address:
            return address
        digits = address.replace("+", "").replace(" ", "").replace("-", "")
        return f"{digits}@{_WA_USER_DOMAIN}"

    def _lookup_pn_from_lid(self, lid: str) -> str:
        """Map a LID (digits) to a phone number (digits) via session.db.

        Returns '' if unknown/unavailable. Uses an in-memory cache.
        """
        if not lid or (not lid.isdigit()) or (not self._session_db):
            return ''
        cached = self._lid_to_pn_cache.get(lid)
        if cached is not None:
            return cached
        pn = ''
        try:
            con = sqlite3.connect(f'file:{self._session_db}?mode=ro', uri=True, timeout=1)
            try:
                row = con.execute('SELECT pn FROM whatsmeow_lid_map WHERE lid=? LIMIT 1', (lid,)).fetchone()
            finally:
                con.close()
            pn = row[0] if row and row[0] else ''
        except sqlite3.Error as e:
            logger.debug(f"LID lookup failed for {lid}: {e}")
        self._lid_to_pn_cache[lid] = pn
        return pn

    # ── Lifecycle ──────────────────────────────────────────────

    async def start(self) -> bool:
        """Start the wacli bridge. Emits authenticated/auth_failure, then ready."""
        resolved = await self.resolve_wacli()
        if not resolved:
            logger.error("wacli binary not found. Install: go install github.com/steipete/wacli@latest")
            return False
        self._wacli_path = resolved

        if not self.has_session():
            await self.emit("auth_failure", "no wacli session found — run `relaybot auth` and scan the QR code")
            return False
        self._session_db = os.path.join(self._home, "session.db")
        await self.emit("authenticated")

        wacli_db = os.path.join(self._home, "wacli.db")
        self._wacli_db = wacli_db if os.path.isfile(wacli_db) else None
        if not self._wacli_db:
            logger.error("wacli database not found — inbound messages will not work")

        self._running = True
        if not await self._start_sync():
            self._running = False
            return False

        if self._wacli_db:
            self._seed_last_rowid()
            self._poll_task = asyncio.create_task(self._poll_loop())

        self._info = TransportInfo(
            self_address=normalize_recipient(self._bot_number) if self._bot_number else None,
        )
        self._ready = True
        logger.info("WhatsApp transport started.")
        await self.emit("change_state", "CONNECTED")
        await self.emit("ready")
        return True

    async def stop(self):
        """Stop the WhatsApp bridge."""
        self._running = False
        self._ready = False

        if self._poll_task and not self._poll_task.done():
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
        self._poll_task = None

        await self._stop_sync()
        logger.info("WhatsApp transport stopped.")

    async def _start_sync(self) -> bool:
        """Start the long-running `wacli sync --follow` process."""
        await self._stop_sync()

        try:
            self._process = await asyncio.create_subprocess_exec(
                self._wacli_path, 'sync', '--follow',
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logger.error(f"Failed to start wacli sync: {e}")
            self._process = None
            return False

        self._monitor_task = asyncio.create_task(self._monitor_loop())
        return True

    async def _stop_sync(self):
        """Stop the sync process (if any)."""
        # Stop monitor task first so it won't auto-restart on exit.
        if self._monitor_task and not self._monitor_task.done():
            self._monitor_task.cancel()
            try:
                await self._monitor_task
            except asyncio.CancelledError:
                pass
        self._monitor_task = None

        if self._process:
            try:
                self._process.terminate()
                await asyncio.wait_for(self._process.wait(), timeout=5)
            except (asyncio.TimeoutError, ProcessLookupError):
                try:
                    self._process.kill()
                except ProcessLookupError:
                    pass
            self._process = None

    async def _monitor_loop(self):
        """Watch wacli sync — report the disconnect and restart it."""
        try:
            if self._process:
                await self._process.wait()
            if not self._running:
                return
            logger.warning("wacli sync ended unexpectedly, restarting...")
            self._ready = False
            await self.emit("disconnected", "wacli sync process exited")
            await self.emit("change_state", "DISCONNECTED")
            await asyncio.sleep(_RESTART_DELAY)
            if not self._running:
                return
            # The restart replaces this task; detach so _stop_sync won't cancel us.
            self._monitor_task = None
            if await self._start_sync():
                self._ready = True
                await self.emit("change_state", "CONNECTED")
            else:
                logger.error("Failed to restart wacli sync")
        except asyncio.CancelledError:
            pass

    # ── Inbound poller ─────────────────────────────────────────

    def _seed_last_rowid(self):
        """Start after the current max rowid so only NEW messages are handled."""
        try:
            conn = sqlite3.connect(self._wacli_db, timeout=5)
            try:
                self._last_rowid = conn.execute("SELECT MAX(rowid) FROM messages").fetchone()[0] or 0
            finally:
                conn.close()
            logger.info(f"WhatsApp poller started (last_rowid={self._last_rowid}, db={self._wacli_db})")
        except sqlite3.Error as e:
            logger.error(f"Failed to read wacli DB: {e}")

    def _fetch_rows(self) -> list[sqlite3.Row]:
        conn = sqlite3.connect(self._wacli_db, timeout=5)
        conn.row_factory = sqlite3.Row
        try:
            cur = conn.execute("""
                SELECT rowid, chat_jid, sender_jid, text, from_me
                FROM messages
                WHERE rowid > ?
                  AND text IS NOT NULL AND text != ''
                  AND chat_jid != 'status@broadcast'
                ORDER BY rowid ASC
            """, (self._last_rowid,))
            return cur.fetchall()
        finally:
            conn.close()

    def _row_to_message(self, row) -> InboundMessage:
        chat_jid = row["chat_jid"] or ""
        is_group = chat_jid.endswith(GROUP_SUFFIX)
        # DMs are addressed by the chat (the contact); groups keep the group address
        sender = chat_jid if is_group else (chat_jid or row["sender_jid"] or "")
        return InboundMessage(
            sender_id=self.to_address(sender),
            text=row["text"] or "",
            is_from_self=bool(row["from_me"]),
            is_group=is_group,
        )

    async def _poll_loop(self):
        """Poll the wacli store and emit new messages sequentially."""
        while self._running:
            try:
                await asyncio.sleep(self._poll_interval)
                if not self._running:
                    break

                rows = self._fetch_rows()
                if rows:
                    logger.debug(f"[whatsapp] poll: {len(rows)} new row(s) after rowid {self._last_rowid}")

                for row in rows:
                    rowid = row["rowid"]
                    self._last_rowid = rowid
                    if rowid in self._seen_rowids:
                        continue
                    self._seen_rowids.add(rowid)
                    await self.emit("message", self._row_to_message(row))

                if len(self._seen_rowids) > _DEDUP_MAX:
                    self._seen_rowids = set(sorted(self._seen_rowids)[-_DEDUP_MAX:])

            except asyncio.CancelledError:
                break
            except sqlite3.Error as e:
                logger.error(f"Error in WhatsApp poll loop: {e}", exc_info=True)
                await asyncio.sleep(5)

    # ── Outbound ───────────────────────────────────────────────

    async def send_message(self, address: str, text: str):
        """Send a text message, split into WhatsApp-sized chunks.

        Raises:
            SendError: bridge not running or wacli rejected the send.
        """
        if not self._running:
            raise SendError("WhatsApp bridge is not running")

        text = clean_text(text)
        if not text:
            return
        jid = self.to_jid(address)

        async with self._send_lock:
            was_syncing = self._process is not None
            if was_syncing:
                await self._stop_sync()
            try:
                for chunk in split_message(text, max_length=_MAX_MESSAGE_LENGTH):
                    await self._wacli_send_text(jid, chunk)
                    await asyncio.sleep(0.3)
            finally:
                if self._running and was_syncing:
                    if not await self._start_sync():
                        logger.error('Failed to restart wacli sync after sending message')

    async def _wacli_send_text(self, jid: str, text: str):
        """Low-level: send a single text chunk. Caller must hold _send_lock."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self._wacli_path, 'send', 'text',
                '--to', jid,
                '--message', text,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SendError(f"wacli send text could not start: {e}") from e
        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=_SEND_TIMEOUT)
        except asyncio.TimeoutError as e:
            # A hung send holds the store lock; sync cannot restart until it exits.
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            raise SendError(f"wacli send text timed out after {_SEND_TIMEOUT}s") from e
        if proc.returncode != 0:
            err = stderr.decode('utf-8', errors='replace') if stderr else ''
            raise SendError(f"wacli send text failed (rc={proc.returncode}): {err[:200]}")
        logger.debug(f"[whatsapp] sent to {jid}: {preview(text)}")

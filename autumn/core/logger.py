"""
Autumn Moderation Bot - Logger Module
=====================================

Tree-style logging to the console and to daily log files.

DESIGN:
    Moderation events (case created, warning recorded, escalation fired)
    carry several ids each, so every log call is a heading plus an
    optional branch of (key, value) pairs:

        [02:30:45 PM] 📋 Case Created
          ├─ Label: W12
          ├─ Guild ID: 123
          └─ Moderator ID: 456

    Files live under LOGS_DIR/<YYYY-MM-DD>/ and roll over at midnight
    without a restart. Error-level lines are copied to a separate file
    and, when a webhook is configured, posted to Discord.
"""

import asyncio
import os
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import aiohttp


# =============================================================================
# Constants
# =============================================================================

LOG_RETENTION_DAYS = 7

WEBHOOK_COLOR = 0xE74C3C
WEBHOOK_TIMEOUT = 10
WEBHOOK_MAX_FIELDS = 25
WEBHOOK_FIELD_LIMIT = 1024
WEBHOOK_TITLE_LIMIT = 256

Details = Sequence[Tuple[str, object]]

# level -> (emoji, copy to error file)
LEVELS: Dict[str, Tuple[str, bool]] = {
    "debug": ("🔍", False),
    "info": ("ℹ️", False),
    "success": ("✅", False),
    "warning": ("⚠️", False),
    "error": ("❌", True),
    "critical": ("🚨", True),
}


def branch_lines(items: Details, indent: str = "  ") -> List[str]:
    """Render (key, value) pairs as tree branches."""
    lines = []
    for i, (key, value) in enumerate(items):
        prefix = "└─" if i == len(items) - 1 else "├─"
        lines.append(f"{indent}{prefix} {key}: {value}")
    return lines


# =============================================================================
# Tree Logger
# =============================================================================

class TreeLogger:
    """
    Console and file logger with tree-formatted details.

    Attributes:
        run_id: Short id stamped on the session header and webhook alerts.
        logs_dir: Root folder holding one folder per day.
        log_file: Current day's main log file.
        error_file: Current day's error-only log file.
    """

    def __init__(
        self,
        logs_dir: Union[str, Path, None] = None,
        retention_days: int = LOG_RETENTION_DAYS,
    ) -> None:
        self.run_id: str = uuid.uuid4().hex[:8]
        self.logs_dir = Path(logs_dir or os.getenv("LOGS_DIR", "logs"))
        self.retention_days = retention_days
        self._webhook_url: Optional[str] = None
        self._pending: Set[asyncio.Task] = set()
        self._day: Optional[str] = None

        self._roll_files()
        self._cleanup_old_logs()
        self._append([
            "=" * 60,
            f"NEW SESSION - RUN ID: {self.run_id}",
            datetime.now().strftime("[%Y-%m-%d %I:%M:%S %p]"),
            "=" * 60,
        ])

    def set_webhook(self, url: Optional[str]) -> None:
        """Post error-level entries with details to this Discord webhook."""
        self._webhook_url = url or None

    # =========================================================================
    # Files
    # =========================================================================

    def _roll_files(self) -> None:
        today = datetime.now().strftime("%Y-%m-%d")
        if today == self._day:
            return

        self._day = today
        day_dir = self.logs_dir / today
        day_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = day_dir / f"Autumn-{today}.log"
        self.error_file = day_dir / f"Autumn-Errors-{today}.log"

    def _cleanup_old_logs(self) -> int:
        """Delete day folders older than the retention window."""
        now = datetime.now()
        removed = 0

        for item in self.logs_dir.iterdir():
            if not item.is_dir():
                continue
            try:
                day = datetime.strptime(item.name, "%Y-%m-%d")
            except ValueError:
                continue
            if (now - day).days > self.retention_days:
                shutil.rmtree(item, ignore_errors=True)
                removed += 1

        if removed:
            print(f"[LOG CLEANUP] Removed {removed} old log folder(s)")
        return removed

    def _append(self, lines: List[str], is_error: bool = False) -> None:
        text = "\n".join(lines) + "\n"
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(text)
        if is_error:
            with open(self.error_file, "a", encoding="utf-8") as f:
                f.write(text)

    # =========================================================================
    # Output
    # =========================================================================

    def _emit(
        self,
        title: str,
        emoji: str,
        body: Optional[List[str]] = None,
        is_error: bool = False,
    ) -> None:
        self._roll_files()

        stamp = datetime.now().strftime("[%I:%M:%S %p]")
        lines = [f"{stamp} {emoji} {title}" if emoji else f"{stamp} {title}"]
        lines.extend(body or [])

        for line in lines:
            print(line)
        self._append(lines, is_error=is_error)

    def _log(self, level: str, msg: str, details: Optional[Details] = None) -> None:
        emoji, is_error = LEVELS[level]
        self._emit(msg, emoji, branch_lines(details) if details else None, is_error)

    def tree(self, title: str, items: Details, emoji: str = "📦") -> None:
        """Log a heading with one level of (key, value) branches."""
        self._emit(title, emoji, branch_lines(items))

    def tree_nested(
        self,
        title: str,
        sections: Sequence[Tuple[str, Details]],
        emoji: str = "📦",
    ) -> None:
        """
        Log a heading with named sections, each holding its own branches.

        Args:
            title: Main heading.
            sections: (section_name, items) pairs.
            emoji: Heading emoji.
        """
        body = []
        for i, (name, items) in enumerate(sections):
            last = i == len(sections) - 1
            body.append(f"  {'└─' if last else '├─'} {name}")
            body.extend(branch_lines(items, indent="     " if last else "  │  "))
        self._emit(title, emoji, body)

    # =========================================================================
    # Levels
    # =========================================================================

    def debug(self, msg: str, details: Optional[Details] = None) -> None:
        """Only written when the DEBUG environment variable is set."""
        if os.getenv("DEBUG"):
            self._log("debug", msg, details)

    def info(self, msg: str, details: Optional[Details] = None) -> None:
        self._log("info", msg, details)

    def success(self, msg: str, details: Optional[Details] = None) -> None:
        self._log("success", msg, details)

    def warning(self, msg: str, details: Optional[Details] = None) -> None:
        self._log("warning", msg, details)

    def error(self, msg: str, details: Optional[Details] = None) -> None:
        """
        Log an error to both files.

        Errors that carry details are also posted to the webhook when one is
        set and an event loop is running.
        """
        self._log("error", msg, details)
        if details and self._webhook_url:
            self._schedule_webhook(msg, details)

    def critical(self, msg: str, details: Optional[Details] = None) -> None:
        self._log("critical", msg, details)

    # =========================================================================
    # Webhook
    # =========================================================================

    def _schedule_webhook(self, title: str, details: Details) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return  # startup/shutdown: files only

        task = loop.create_task(self._send_webhook(title, details))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def webhook_payload(self, title: str, details: Details) -> dict:
        """Discord embed payload for an error alert, clipped to embed limits."""
        fields = [
            {
                "name": str(key)[:WEBHOOK_TITLE_LIMIT],
                "value": str(value)[:WEBHOOK_FIELD_LIMIT] or "-",
                "inline": False,
            }
            for key, value in list(details)[:WEBHOOK_MAX_FIELDS]
        ]
        return {
            "embeds": [{
                "title": f"❌ {title}"[:WEBHOOK_TITLE_LIMIT],
                "color": WEBHOOK_COLOR,
                "fields": fields,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "footer": {"text": f"Autumn • Run {self.run_id}"},
            }]
        }

    async def _send_webhook(self, title: str, details: Details) -> None:
        if not self._webhook_url:
            return

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._webhook_url,
                    json=self.webhook_payload(title, details),
                    timeout=aiohttp.ClientTimeout(total=WEBHOOK_TIMEOUT),
                ) as resp:
                    if resp.status >= 400:
                        print(f"[WEBHOOK] Discord returned HTTP {resp.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            # print only: error() would post to this webhook again.
            print(f"[WEBHOOK] Delivery failed: {e}")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()


__all__ = [
    "branch_lines",
    "LEVELS",
    "logger",
    "TreeLogger",
]

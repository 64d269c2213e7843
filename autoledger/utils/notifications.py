"""Notification helpers (Telegram)."""

import logging
from typing import Optional

import httpx

from autoledger.config import settings
from autoledger.domain.models import RunSummary

logger = logging.getLogger(__name__)


def format_tiered_message(tier: str, title: str, body: str) -> str:
    tier_u = (tier or "INFO").upper()
    if tier_u == "BLOCKED":
        prefix = "BLOCKED"
    elif tier_u == "ERROR":
        prefix = "ERROR"
    else:
        prefix = "INFO"
    return f"[{prefix}] {title}\n\n{body}".strip()


def format_run_alert(summary: RunSummary) -> Optional[str]:
    """Alert text for a run with blocking errors, None when the run is clean"""
    blocking = summary.blocking_errors
    if not blocking:
        return None

    lines = []
    for err in blocking:
        when = err.occurrence_date.isoformat() if err.occurrence_date else "-"
        retry = "retryable" if err.retryable else "needs attention"
        lines.append(f"- {err.automation_id} @ {when}: {err.error_type} ({retry})\n  {err.message}")

    body = (
        f"{len(blocking)} automation(s) stopped at a failed occurrence.\n"
        f"Checkpoints were held back; the next run retries from there.\n\n"
        + "\n".join(lines)
    )
    return format_tiered_message("BLOCKED", f"Automation run {summary.as_of.isoformat()}", body)


async def send_telegram_message(text: str) -> bool:
    """Send a Telegram message if enabled and bot token + chat ID are configured."""
    if not settings.TELEGRAM_ENABLED:
        return False

    token = settings.TELEGRAM_BOT_TOKEN
    chat_id = settings.TELEGRAM_CHAT_ID

    if not token or not chat_id:
        logger.info("Telegram alert skipped (missing TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID)")
        return False

    url = f"https://api.telegram.org/bot{token}/sendMessage"
    payload = {"chat_id": chat_id, "text": text}

    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            resp = await client.post(url, json=payload)
            resp.raise_for_status()
        return True
    except httpx.HTTPError as exc:
        logger.error(f"Telegram alert failed: {exc}")
        return False


async def notify_run_summary(summary: RunSummary) -> bool:
    text = format_run_alert(summary)
    if text is None:
        return False
    return await send_telegram_message(text)

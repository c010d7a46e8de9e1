"""Branding utilities for Harper."""

from __future__ import annotations

from typing import Optional


def section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def build_branded_blocks(
    message: str,
    *,
    extra_blocks: Optional[list[dict]] = None,
    logo_url: Optional[str] = None,
) -> Optional[list[dict]]:
    """Return Slack blocks that include the Harper logo (if configured)."""

    blocks: list[dict] = []
    if logo_url:
        blocks.append(
            {
                "type": "image",
                "image_url": logo_url,
                "alt_text": "Harper logo",
            }
        )

    blocks.append(section(message))
    if extra_blocks:
        blocks.extend(extra_blocks)

    return blocks or None

DEFAULT_MAX_REPLY_LENGTH = 4000
MAX_CAPTION_LENGTH = 200

# A newline earlier than this fraction of the limit makes a chunk too short.
_MIN_SPLIT_RATIO = 0.3


def split_message(text: str, max_len: int = DEFAULT_MAX_REPLY_LENGTH) -> list[str]:
    """Split ``text`` into chunks no longer than ``max_len``, preferring line breaks."""
    if max_len <= 0:
        raise ValueError("max_len must be positive")
    if len(text) <= max_len:
        return [text]

    parts: list[str] = []
    remaining = text
    while remaining:
        if len(remaining) <= max_len:
            parts.append(remaining)
            break
        split_at = remaining.rfind("\n", 0, max_len + 1)
        if split_at < max_len * _MIN_SPLIT_RATIO:
            split_at = max_len
        parts.append(remaining[:split_at])
        remaining = remaining[split_at:]
        if remaining.startswith("\n"):
            remaining = remaining[1:]
    return parts


def truncate_caption(caption: str | None, max_len: int = MAX_CAPTION_LENGTH) -> str | None:
    if caption is None:
        return None
    return caption[:max_len]

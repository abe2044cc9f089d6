"""Messaging channel names."""


def user_channel(user_id) -> str:
    return f"user:{user_id}"


def is_download_channel(channel: str) -> bool:
    return channel.startswith("download:")

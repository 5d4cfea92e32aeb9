BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]
BYTES_PER_MB = 1024 * 1024


def mb_to_bytes(mb: int) -> int:
    return int(mb) * BYTES_PER_MB


def format_bytes(num_bytes: float) -> str:
    """
    Render a byte count in the largest unit not exceeding it (base 1024).

    Two decimals at most, trailing zeros dropped: 1536 -> "1.5 KB",
    1024 -> "1 KB", 0 -> "0 B".
    """
    num_bytes = max(num_bytes, 0)

    power = 0
    while power < len(BYTE_UNITS) - 1 and num_bytes >= 1024 ** (power + 1):
        power += 1

    value = round(num_bytes / (1024 ** power), 2)
    if value >= 1024 and power < len(BYTE_UNITS) - 1:
        # 1048575 rounds to 1024 KB; show it as 1 MB
        power += 1
        value = round(num_bytes / (1024 ** power), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {BYTE_UNITS[power]}"


def format_duration(seconds: float) -> str:
    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"

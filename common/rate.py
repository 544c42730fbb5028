"""Human-readable formatting of transfer rates."""

KIB: int = 1024
MIB: int = 1024 ** 2
GIB: int = 1024 ** 3


def format_rate(bytes_per_second: float) -> str:
    """
    Format a byte quantity (typically bytes/second) with binary units.

    The KiB and MiB thresholds are strictly greater-than, so exactly 1024
    stays in bytes (``1024.00 B``) rather than becoming ``1.00 KiB``.
    Exactly one GiB is reported as ``1.00 GiB``.

    Args:
        bytes_per_second: Non-negative byte count or rate

    Returns:
        Formatted string such as ``"3.20 MiB"`` or ``"512.00 B"``
    """
    # Inclusive only here: 2**30 prints "1.00 GiB", not "1024.00 MiB" as a
    # strict threshold would. KiB and MiB stay strict.
    if bytes_per_second >= GIB:
        return f"{bytes_per_second / GIB:.2f} GiB"
    if bytes_per_second > MIB:
        return f"{bytes_per_second / MIB:.2f} MiB"
    if bytes_per_second > KIB:
        return f"{bytes_per_second / KIB:.2f} KiB"
    return f"{bytes_per_second:.2f} B"


def compute_rate(num_bytes: int, elapsed_seconds: float) -> float:
    """Bytes per second; zero elapsed time yields infinity."""
    if elapsed_seconds <= 0:
        return float("inf")
    return num_bytes / elapsed_seconds

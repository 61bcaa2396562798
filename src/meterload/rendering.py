from collections import Counter
from collections.abc import Mapping


def render_arrival_series(series: Mapping[int, int], width: int = 60) -> str:
    """One bar per observed second, relative to the first one. Empty seconds are skipped."""
    if not series:
        return "No arrival data."

    first = min(series)
    peak = max(series.values())
    lines = ["Requests per second"]
    for second in sorted(series):
        count = series[second]
        bar = "=" * max(1, int(count / peak * width))
        lines.append(f"+{second - first:>5}s |{bar} ({count})")
    return "\n".join(lines)


def render_rate_distribution(series: Mapping[int, int], width: int = 40) -> str:
    """How many observed seconds ran at each request rate, lowest rate first."""
    if not series:
        return "No arrival data."

    seconds_at_rate = Counter(series.values())
    peak = max(seconds_at_rate.values())
    lines = [f"Rate distribution over {len(series)} seconds"]
    for rate in sorted(seconds_at_rate):
        seconds = seconds_at_rate[rate]
        bar = "#" * max(1, int(seconds / peak * width))
        lines.append(f"{rate:>6} req/s | {bar} ({seconds})")
    return "\n".join(lines)

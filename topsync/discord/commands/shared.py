from __future__ import annotations

import math
from typing import Optional


def format_latency(latency_s: Optional[float]) -> str:
    # discord.py reports nan/inf before the first heartbeat ack
    if latency_s is None or math.isnan(latency_s) or math.isinf(latency_s):
        return "n/a"
    return f"{round(latency_s * 1000)} ms"


__all__ = ["format_latency"]

from prometheus_client import Counter, Histogram

# Websocket connection failures by venue
WS_FAILURES = Counter(
    "ws_failures_total",
    "Total websocket connection failures",
    ["venue"],
)

# Inbound frames by venue and decoded event kind
FRAMES = Counter(
    "feed_frames_total",
    "Total inbound feed frames classified by the decoder",
    ["venue", "kind"],
)

# Venue reported errors and undecodable frames
PROTOCOL_ERRORS = Counter(
    "feed_protocol_errors_total",
    "Total frames dropped as protocol errors",
    ["venue"],
)

# Keepalive messages sent
HEARTBEATS = Counter(
    "heartbeats_sent_total",
    "Total heartbeat messages sent to the venue",
    ["venue"],
)

# Simulation scenarios by outcome (filled, partial, unfilled, unavailable)
SIMULATIONS = Counter(
    "simulations_total",
    "Total simulated execution scenarios",
    ["outcome"],
)

# Simulated slippage against the reference price (percent)
SIM_SLIPPAGE = Histogram(
    "simulated_slippage_pct",
    "Distribution of simulated slippage in percent of the reference price",
    ["side"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


__all__ = [
    "WS_FAILURES",
    "FRAMES",
    "PROTOCOL_ERRORS",
    "HEARTBEATS",
    "SIMULATIONS",
    "SIM_SLIPPAGE",
]

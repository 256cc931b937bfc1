#!/usr/bin/env python3
"""Constants for peer mode timing.

Both intervals are fixed: the poller reads the clipboard once per
POLL_INTERVAL, and a dropped connection is retried every RECONNECT_DELAY
seconds forever, without growing the delay.
"""

# Delay between clipboard reads in seconds.
POLL_INTERVAL: float = 0.3

# Delay between the loss of a connection and the next connect attempt, in
# seconds. Also the delay between failed connect attempts.
RECONNECT_DELAY: float = 1.0

"""Real-time notification feed: Socket.IO channel, client state and local API.

Kept as a regular package so ``notification_feed`` never resolves to an
unrelated namespace package from site-packages.
"""

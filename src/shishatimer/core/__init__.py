"""
Session core for the charcoal timer.

- transitions: pure session state changes and countdown math
- registry: table collection and durable snapshot
- engine: applies transitions, persists, fires alerts
- ticker: periodic expiry sweep
- notifier: alert capabilities
"""

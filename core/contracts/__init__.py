"""core.contracts

Stable interfaces (ABCs) between the watchface controller and its host platform.

- The controller depends on contracts, never on a concrete host, clock source
  or dispatch queue.
- Platform adapters (e.g. watchface.adapters.tk_dispatch_queue) implement them.

This package intentionally contains only interfaces and shared type definitions.
"""

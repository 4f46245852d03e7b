"""
Turnstile: admission control for shared GPUs.

Waits until enough devices are idle, claims them atomically against other
instances running on the same host, and launches a command bound to them.
"""

__version__ = "0.3.0"

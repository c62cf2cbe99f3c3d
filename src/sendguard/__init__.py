"""sendguard: send-time outbound email policy gate."""

__version__ = "0.1.0"

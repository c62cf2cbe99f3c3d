"""Core domain package for sendguard.

Core contains the decision engine, pattern library and send orchestration
without any HTTP or mail-client specific code, keeping the policy logic
portable across hosts.
"""

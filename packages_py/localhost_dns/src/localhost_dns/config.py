"""
Configuration utilities for localhost_dns
"""
import logging
import os
import socket
from typing import Optional

from .types import AddressFamily, LocalhostDnsConfig


logger = logging.getLogger("localhost_dns.config")

LOCALHOST = "localhost"
LOCAL_IPV4 = "127.0.0.1"
LOCAL_IPV6 = "::1"

ENV_PROBE_TIMEOUT = "LOCALHOST_DNS_PROBE_TIMEOUT"
ENV_ENABLED = "LOCALHOST_DNS_ENABLED"


def merge_config(config: Optional[LocalhostDnsConfig] = None) -> LocalhostDnsConfig:
    """Merge user config with defaults and validate it"""
    if config is None:
        config = LocalhostDnsConfig()
    if config.probe_timeout_seconds <= 0:
        raise ValueError(
            f"probe_timeout_seconds must be positive, got {config.probe_timeout_seconds}"
        )
    return config


def load_config_from_env(base: Optional[LocalhostDnsConfig] = None) -> LocalhostDnsConfig:
    """
    Build a config from environment overrides.

    Reads LOCALHOST_DNS_PROBE_TIMEOUT (seconds, float) and
    LOCALHOST_DNS_ENABLED (true/false). Invalid values are logged
    and the base value is kept.

    Args:
        base: Config to start from. Default: LocalhostDnsConfig()

    Returns:
        A new LocalhostDnsConfig
    """
    base = base or LocalhostDnsConfig()
    timeout = base.probe_timeout_seconds
    enabled = base.enabled

    raw_timeout = os.getenv(ENV_PROBE_TIMEOUT)
    if raw_timeout:
        try:
            parsed = float(raw_timeout)
            if parsed <= 0:
                raise ValueError(raw_timeout)
            timeout = parsed
        except ValueError:
            logger.warning(
                f"load_config_from_env: Invalid {ENV_PROBE_TIMEOUT} {raw_timeout!r}, "
                f"keeping {timeout}"
            )

    raw_enabled = os.getenv(ENV_ENABLED)
    if raw_enabled:
        lowered = raw_enabled.strip().lower()
        if lowered in ("true", "1", "yes"):
            enabled = True
        elif lowered in ("false", "0", "no"):
            enabled = False
        else:
            logger.warning(
                f"load_config_from_env: Invalid {ENV_ENABLED} {raw_enabled!r}, keeping {enabled}"
            )

    logger.debug(f"load_config_from_env: probe_timeout_seconds={timeout}, enabled={enabled}")
    return LocalhostDnsConfig(
        probe_timeout_seconds=timeout,
        ipv6_loopback=base.ipv6_loopback,
        ipv4_loopback=base.ipv4_loopback,
        enabled=enabled,
    )


def get_top_level_label(hostname: Optional[str]) -> str:
    """
    Get the substring after the last '.' of a hostname.

    The whole hostname is returned when it contains no '.',
    and '' for an empty or missing hostname.
    """
    if not hostname:
        return ""
    return hostname[hostname.rfind(".") + 1:]


def is_localhost_host(hostname: Optional[str]) -> bool:
    """
    Check if a hostname belongs to the localhost family.

    Matches 'localhost', any '*.localhost' name (RFC 6761 section 6.3)
    and the literal loopback addresses 127.0.0.1 and ::1.
    The comparison is case-sensitive.
    """
    if not hostname:
        return False
    return (
        get_top_level_label(hostname) == LOCALHOST
        or hostname == LOCAL_IPV4
        or hostname == LOCAL_IPV6
    )


def validate_port(port: int) -> int:
    """Validate a TCP port number"""
    if not 1 <= port <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def get_default_port(scheme: str, port: Optional[int] = None) -> int:
    """Use the explicit port, or 443 for https and 80 otherwise"""
    if port:
        return validate_port(port)
    return 443 if scheme == "https" else 80


def get_connection_key(host: str, port: int) -> str:
    """Cache key for a host/port pair"""
    return f"{host}:{port}"


def family_from_socket(family: int) -> AddressFamily:
    """Map a socket address family to the 4/6 tag"""
    return 6 if family == socket.AF_INET6 else 4

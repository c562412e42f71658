"""Wire formats, checksums, an event loop, and socket, TUN and adapter helpers for a user-space TCP/IPv4 stack."""

__version__ = "0.1.0"

__all__ = [
    "address",
    "arp",
    "checksum",
    "debug",
    "ethernet",
    "eventloop",
    "exceptions",
    "fd_adapter",
    "file_descriptor",
    "helpers",
    "ipv4",
    "lossy_adapter",
    "parser",
    "rng",
    "sockets",
    "tcp_config",
    "tcp_message",
    "tcp_over_ip",
    "tcp_segment",
    "tun",
    "tuntap_adapter",
]
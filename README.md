# tcpnet

Building blocks for running a user-space TCP implementation over IPv4 on Linux.
Everything is in the standard library. There are no third-party dependencies.

## What is in the package

- **Wire formats**
  - `tcpnet.ethernet`: `EthernetHeader`, `EthernetFrame`, `format_ethernet_address` and `ETHERNET_BROADCAST`.
  - `tcpnet.ipv4`: `IPv4Header`, `IPv4Datagram` (also available as `InternetDatagram`) and `format_ipv4`.
  - `tcpnet.arp`: `ARPMessage`. Only Ethernet/IPv4 requests and replies are supported.
  - `tcpnet.tcp_segment`: `TCPSegment`. It skips TCP options when parsing and never writes them.

  Each type has a `parse(parser)` class method, which reads from a `Parser`, and a `serialize(serializer)` method, which writes to a `Serializer`.
  The parser and serializer live in `tcpnet.parser`.
  Parsing does not raise on bad input. Instead it sets the parser's sticky error flag, which you read with `parser.has_error()`.
  `IPv4Header.parse` checks the header checksum. `TCPSegment.parse` checks the segment checksum against the pseudo-header sum you pass to it.
- **Checksums**: `tcpnet.checksum.InternetChecksum` computes the one's-complement sum over bytes, or over lists of byte chunks.
- **TCP messages**: `tcpnet.tcp_message` provides `TCPSenderMessage`, `TCPReceiverMessage`, `TCPMessage` and `UserDatagramInfo`.
  Sequence and acknowledgment numbers are raw 32-bit integers.
- **Helpers** (`tcpnet.helpers`):
  - `serialize(obj)` returns a list of byte chunks.
  - `parse(cls, buffers, *args)` returns an instance, or `None` if parsing failed.
  - `concat`, `pretty_print` and `clone` join, escape and copy packet data.
  - `summary(frame)` describes an Ethernet frame and what it carries in one line.
- **Addresses**: `tcpnet.address.Address` wraps a socket address.
  - `Address("1.2.3.4", 80)` builds an address without name resolution. `Address.resolve(host, service)` resolves names.
  - `Address.from_ipv4_numeric` and `Address.from_sockaddr` build an address from other forms.
  - `ip()`, `port()`, `ip_port()`, `ipv4_numeric()` and `str()` read an address back.
- **System wrappers**
  - `tcpnet.file_descriptor.FileDescriptor` is a shared handle with these methods:
    - `read`, `readv` and `write` (which also writes a list of buffers).
    - `set_blocking`.
    - `duplicate`, which returns a handle that shares the descriptor and its read and write counters.
    - `eof`, `closed`, `read_count` and `write_count`.
    - Use as a context manager.
  - `tcpnet.sockets` has `UDPSocket`, `TCPSocket`, `PacketSocket`, `LocalStreamSocket` and `LocalDatagramSocket`.
  - `tcpnet.tun` has `TunFD` and `TapFD`, which open existing TUN/TAP devices.
- **Event loop**: `tcpnet.eventloop.EventLoop` is a single-threaded loop built on `poll`. It supports:
  - Rule categories.
  - Plain rules through `add_rule` and descriptor rules through `add_fd_rule`, with `Direction.IN` or `Direction.OUT`.
  - Cancellation through the returned `RuleHandle`.
  - Detection of busy waits.

  `wait_next_event(timeout_ms)` serves at most one rule and returns `Result.SUCCESS`, `Result.TIMEOUT` or `Result.EXIT`.
- **Adapters**
  - `tcpnet.fd_adapter.FdAdapterBase` holds an `FdAdapterConfig` (from `tcpnet.tcp_config`, alongside `TCPConfig`) and a listening flag.
  - `tcpnet.tcp_over_ip.TCPOverIPv4Adapter` wraps a `TCPMessage` in an IPv4 datagram. It also unwraps datagrams that belong to the configured connection; while listening, it takes on the addresses of an incoming SYN.
  - `tcpnet.tuntap_adapter.TCPOverIPv4OverTunFdAdapter` does the same through a TUN device.
  - `tcpnet.lossy_adapter.LossyFdAdapter` wraps another adapter and drops reads and writes at random. It uses the config's `loss_rate_dn` and `loss_rate_up`, which are counted out of 65536.
- **Miscellany**
  - `tcpnet.debug` routes `debug(...)` output to a handler you can replace; the default handler writes to stderr.
  - `tcpnet.rng.get_random_engine()` returns a `random.Random` seeded from the OS.
  - `tcpnet.exceptions` provides `TaggedError`, `UnixError`, `check_system_call` and `notnull`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example: build and parse an IPv4 datagram

```python
from tcpnet.address import Address
from tcpnet.helpers import concat, parse, serialize
from tcpnet.ipv4 import IPv4Datagram

dgram = IPv4Datagram()
dgram.header.src = Address("10.0.0.2", 0).ipv4_numeric()
dgram.header.dst = Address("10.0.0.1", 0).ipv4_numeric()
dgram.header.proto = 144
dgram.payload = [b"hello"]
dgram.header.len = dgram.header.hlen * 4 + 5
dgram.header.compute_checksum()

wire = serialize(dgram)             # list of byte chunks
parsed = parse(IPv4Datagram, wire)  # None if the bytes do not parse
print(parsed.header, concat(parsed.payload))
```

## Example: an event loop over a socket pair

```python
import socket
from tcpnet.eventloop import Direction, EventLoop
from tcpnet.file_descriptor import FileDescriptor

a, b = socket.socketpair()
reader = FileDescriptor(a.detach())
writer = FileDescriptor(b.detach())
writer.write(b"ping")

loop = EventLoop()
received = []
loop.add_fd_rule("read", reader, Direction.IN, lambda: received.append(reader.read(4096)))
loop.wait_next_event(100)
print(received)  # [b'ping']
```

## What the package does not do

The package provides no TCP state machine: it has no sender, no receiver, no reassembler and no byte stream. It also has no socket-like object that runs a TCP connection on a thread of its own.
The adapters produce and consume `TCPMessage` values. Deciding what to send and when is left to code you supply.
There are likewise no network-interface, ARP-cache or router classes; `ARPMessage` and `EthernetFrame` are only wire formats.
The package installs no command-line programs.

Opening TUN/TAP devices and packet sockets needs the matching privileges on Linux. The TUN device must also already exist.
"""
Brief: Unit tests for the UDP/TCP wire transport using local dnslib stub servers.

Inputs:
  - None

Outputs:
  - None
"""

import socket
import struct
import threading
import time

import pytest
from dnslib import AAAA, MX, QTYPE, RR, TXT, A, DNSRecord

from dnsolve.exceptions import InvalidInputError, QueryTimeoutError, TransportError
from dnsolve.transports.wire import (
    WireTransport,
    _parse_resolv_conf_nameservers,
    parse_server_address,
    reply_to_document,
)


def _answer(query, truncate=False, bad_id=False):
    reply = query.reply()
    qname = query.q.qname
    qtype = query.q.qtype
    if qtype == QTYPE.MX:
        reply.add_answer(RR(qname, QTYPE.MX, rdata=MX("mx.example.com."), ttl=300))
    elif qtype == QTYPE.TXT:
        reply.add_answer(RR(qname, QTYPE.TXT, rdata=TXT("hello world"), ttl=30))
    elif qtype == QTYPE.AAAA:
        reply.add_answer(RR(qname, QTYPE.AAAA, rdata=AAAA("2001:db8::1"), ttl=60))
    else:
        reply.add_answer(RR(qname, QTYPE.A, rdata=A("192.0.2.53"), ttl=60))
    if truncate:
        reply.header.tc = 1
        reply.rr = []
    if bad_id:
        reply.header.id = (query.header.id + 1) % 65536
    return reply


class _UDPStub:
    def __init__(self, mode="ok"):
        self.mode = mode
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.addr = self.sock.getsockname()
        self.queries = []
        self._stop = False
        self.thread = threading.Thread(target=self._loop, daemon=True)

    def start(self):
        self.thread.start()
        time.sleep(0.02)

    def _loop(self):
        while not self._stop:
            try:
                self.sock.settimeout(0.2)
                data, peer = self.sock.recvfrom(4096)
            except OSError:
                continue
            query = DNSRecord.parse(data)
            self.queries.append(query)
            if self.mode == "silent":
                continue
            reply = _answer(
                query,
                truncate=self.mode == "truncate",
                bad_id=self.mode == "bad_id",
            )
            try:
                self.sock.sendto(reply.pack(), peer)
            except OSError:
                pass

    def close(self):
        self._stop = True
        try:
            self.sock.close()
        except OSError:
            pass


class _TCPStub:
    """Length-prefixed DNS over TCP on a given port."""

    def __init__(self, port):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", port))
        self.sock.listen(4)
        self.hits = 0
        self.thread = threading.Thread(target=self._loop, daemon=True)
        self.thread.start()

    def _recv_exact(self, conn, n):
        buf = b""
        while len(buf) < n:
            chunk = conn.recv(n - len(buf))
            if not chunk:
                break
            buf += chunk
        return buf

    def _loop(self):
        while True:
            try:
                conn, _ = self.sock.accept()
            except OSError:
                return
            with conn:
                (length,) = struct.unpack("!H", self._recv_exact(conn, 2))
                query = DNSRecord.parse(self._recv_exact(conn, length))
                self.hits += 1
                payload = _answer(query).pack()
                conn.sendall(struct.pack("!H", len(payload)) + payload)

    def close(self):
        try:
            self.sock.close()
        except OSError:
            pass


@pytest.fixture
def udp_stub(request):
    s = _UDPStub(getattr(request, "param", "ok"))
    s.start()
    try:
        yield s
    finally:
        s.close()


def _server(stub):
    host, port = stub.addr
    return f"{host}:{port}"


def test_udp_query_returns_answer_document(udp_stub):
    """
    Brief: A UDP round trip is converted into the answer document schema.

    Inputs:
      - udp_stub: local UDP DNS stub

    Outputs:
      - None: Asserts status, flags, question and answer data
    """
    transport = WireTransport(_server(udp_stub))
    doc = transport.perform_query("example.com", 15, None, False, 1.0)
    assert doc["Status"] == 0
    assert doc["TC"] is False
    assert doc["RA"] is True
    assert doc["Question"] == [{"name": "example.com.", "type": 15}]
    assert doc["Answer"] == [
        {"name": "example.com.", "type": 15, "TTL": 300, "data": "10 mx.example.com."}
    ]


def test_dnssec_sets_do_bit_via_edns(udp_stub):
    transport = WireTransport(_server(udp_stub))
    transport.perform_query("example.com", 1, None, True, 1.0)
    query = udp_stub.queries[-1]
    opts = [rr for rr in query.ar if rr.rtype == QTYPE.OPT]
    assert opts, "expected an OPT record"
    assert opts[0].edns_do == 1


def test_per_call_server_override(udp_stub):
    transport = WireTransport("127.0.0.1:9")
    doc = transport.perform_query("example.com", 28, _server(udp_stub), False, 1.0)
    assert doc["Answer"][0]["data"] == "2001:db8::1"


@pytest.mark.parametrize("udp_stub", ["silent"], indirect=True)
def test_silent_server_times_out(udp_stub):
    transport = WireTransport(_server(udp_stub))
    with pytest.raises(QueryTimeoutError):
        transport.perform_query("example.com", 1, None, False, 0.1)


@pytest.mark.parametrize("udp_stub", ["bad_id"], indirect=True)
def test_mismatched_id_is_transport_error(udp_stub):
    transport = WireTransport(_server(udp_stub))
    with pytest.raises(TransportError):
        transport.perform_query("example.com", 1, None, False, 1.0)


@pytest.mark.parametrize("udp_stub", ["truncate"], indirect=True)
def test_truncated_udp_falls_back_to_tcp(udp_stub):
    tcp = _TCPStub(udp_stub.addr[1])
    try:
        transport = WireTransport(_server(udp_stub))
        doc = transport.perform_query("example.com", 1, None, False, 1.0)
    finally:
        tcp.close()
    assert tcp.hits == 1
    assert doc["TC"] is False
    assert doc["Answer"][0]["data"] == "192.0.2.53"


def test_reply_to_document_without_answers_omits_answer_key():
    query = DNSRecord.question("nx.example", "A")
    reply = query.reply()
    reply.header.rcode = 3
    doc = reply_to_document(reply)
    assert doc["Status"] == 3
    assert "Answer" not in doc


def test_reply_to_document_txt_keeps_quotes():
    query = DNSRecord.question("example.com", "TXT")
    doc = reply_to_document(_answer(query))
    assert doc["Answer"][0]["data"] == '"hello world"'


@pytest.mark.parametrize(
    "server,expected",
    [
        ("8.8.8.8", ("8.8.8.8", 53, False)),
        ("1.1.1.1:5353", ("1.1.1.1", 5353, False)),
        ("2606:4700::1111", ("2606:4700::1111", 53, True)),
        ("[2606:4700::1111]:853", ("2606:4700::1111", 853, True)),
        (" 9.9.9.9 ", ("9.9.9.9", 53, False)),
    ],
)
def test_parse_server_address(server, expected):
    assert parse_server_address(server) == expected


@pytest.mark.parametrize(
    "server", ["dns.google", "1.1.1.1:abc", "[::1", "[::1]x53", "300.1.1.1"]
)
def test_parse_server_address_rejects_garbage(server):
    with pytest.raises(TransportError):
        parse_server_address(server)


def test_invalid_default_server_rejected_at_construction():
    with pytest.raises(TransportError):
        WireTransport("not-an-ip")


def test_parse_resolv_conf(tmp_path):
    conf = tmp_path / "resolv.conf"
    conf.write_text(
        "# generated\nsearch example.com\nnameserver 10.0.0.2\n"
        "nameserver 2001:db8::53 # v6\n"
    )
    assert _parse_resolv_conf_nameservers(str(conf)) == ["10.0.0.2", "2001:db8::53"]


@pytest.mark.parametrize(
    "server", ["https://dns.google/resolve", "1.2.3", "10.0.0.1:99999"]
)
def test_validate_server_rejects_non_nameserver_values(server):
    with pytest.raises(InvalidInputError):
        WireTransport("127.0.0.1").validate_server(server)


def test_validate_server_accepts_addresses():
    t = WireTransport("127.0.0.1")
    t.validate_server("9.9.9.9")
    t.validate_server("[::1]:5353")

import socket

import pytest

from tronserver.network.packets import (
    BigServerInfoPacket, ProtocolRevision, ServerDescriptor, ServerInfoRequestPacket, SmallServerInfoPacket,
)
from tronserver.network.transport.envelope import LegacyEnvelope, MalformedEnvelope
from tronserver.query import decode_reply, send_query


def test_decode_small_reply():
    datagram = SmallServerInfoPacket(port=4534, hostname='grid.example.org').serialize()
    assert decode_reply(datagram) == {'port': 4534, 'hostname': 'grid.example.org', 'transaction': 0}


def test_decode_big_reply_with_revision():
    server = ServerDescriptor(name='Grid', port=4534, revision=ProtocolRevision.SHORT_FLAGS)
    fields = decode_reply(BigServerInfoPacket(server).serialize(), ProtocolRevision.SHORT_FLAGS)
    assert fields['name'] == 'Grid'
    assert fields['walls_length'] == 10.0


def test_decode_truncated_reply():
    datagram = LegacyEnvelope.encode(51, b'\x11\xb6\x00\x00\x00\x01')
    with pytest.raises(MalformedEnvelope):
        decode_reply(datagram)


def test_decode_unexpected_descriptor():
    with pytest.raises(MalformedEnvelope):
        decode_reply(LegacyEnvelope.encode(52, b''))


class QuerySocket:
    def __init__(self, reply=None, error=None, bind_error=None):
        self.reply = reply
        self.error = error
        self.bind_error = bind_error
        self.sent = []
        self.timeouts = []
        self.closed = False

    def bind(self, addr):
        if self.bind_error:
            raise self.bind_error

    def sendto(self, data, addr):
        self.sent.append((data, addr))

    def settimeout(self, value):
        self.timeouts.append(value)

    def recvfrom(self, bufsize):
        if self.error:
            raise self.error
        return self.reply, SERVER

    def close(self):
        self.closed = True


SERVER = ('127.0.0.1', 4534)


def test_send_query_timeout(capsys):
    sock = QuerySocket(error=socket.timeout('timed out'))
    assert send_query(sock, SERVER, timeout=0.5) is None
    assert 'NO RESPONSE' in capsys.readouterr().out
    assert sock.timeouts == [0.5]
    assert sock.sent == [(ServerInfoRequestPacket().serialize(), SERVER)]


def test_send_query_big_request_and_reply(capsys):
    server = ServerDescriptor(name='Grid', port=4534)
    sock = QuerySocket(reply=BigServerInfoPacket(server).serialize())
    fields = send_query(sock, SERVER, big=True)
    assert fields['name'] == 'Grid'
    assert sock.sent[0][0] == ServerInfoRequestPacket(big=True).serialize()
    assert "name = 'Grid'" in capsys.readouterr().out


def test_send_query_malformed_reply(capsys):
    sock = QuerySocket(reply=b'\x00\x32')
    assert send_query(sock, SERVER) is None
    assert 'WARNING:' in capsys.readouterr().out


def test_main_reports_socket_error(monkeypatch, capsys):
    import tronserver.query as query

    sock = QuerySocket(bind_error=OSError('permission denied'))
    monkeypatch.setattr(query.socket, 'socket', lambda *args, **kwargs: sock)
    query.main(['10.0.0.1', '4534'])

    out = capsys.readouterr().out
    assert 'Target: 10.0.0.1:4534' in out
    assert 'SOCKET ERROR: permission denied' in out
    assert sock.closed


def test_main_queries_small_info(monkeypatch, capsys):
    import tronserver.query as query

    sock = QuerySocket(reply=SmallServerInfoPacket(port=4534).serialize())
    monkeypatch.setattr(query.socket, 'socket', lambda *args, **kwargs: sock)
    query.main([])

    assert sock.sent == [(ServerInfoRequestPacket().serialize(), ('127.0.0.1', 4534))]
    assert 'port = 4534' in capsys.readouterr().out
    assert sock.closed

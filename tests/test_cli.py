"""Tests for the click CLI."""

import socket
import threading

from click.testing import CliRunner

from peerlink.cli import cli, format_size
from peerlink.transfer import CodeAllocator

LOOPBACK = '127.0.0.1'


def one_shot_server(payload: bytes) -> int:
    """Serve `payload` to a single connection from a background thread."""
    server = socket.create_server((LOOPBACK, 0))
    port = server.getsockname()[1]

    def run():
        conn, _ = server.accept()
        server.close()
        with conn:
            conn.sendall(payload)

    threading.Thread(target=run, daemon=True).start()
    return port


class TestFormatSize:

    def test_bytes(self):
        assert format_size(512) == '512.0 B'

    def test_megabytes(self):
        assert format_size(10 * 1024 * 1024) == '10.0 MB'


class TestCli:

    def test_help(self):
        result = CliRunner().invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'share' in result.output
        assert 'receive' in result.output

    def test_config_prints_example(self):
        result = CliRunner().invoke(cli, ['config'], obj={})
        assert result.exit_code == 0
        assert '"api_port": 8080' in result.output

    def test_config_save(self, tmp_path):
        path = tmp_path / 'config.json'
        result = CliRunner().invoke(cli, ['config', '--save', str(path)], obj={})
        assert result.exit_code == 0
        assert path.exists()

    def test_receive(self, tmp_path):
        port = one_shot_server(b'Filename: hello.txt\nhello world')

        result = CliRunner().invoke(
            cli, ['receive', str(port), '--host', LOOPBACK, '-o', str(tmp_path)],
            obj={},
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / 'hello.txt').read_bytes() == b'hello world'

    def test_receive_keeps_existing_file(self, tmp_path):
        (tmp_path / 'hello.txt').write_text('mine')
        port = one_shot_server(b'Filename: hello.txt\ntheirs')

        result = CliRunner().invoke(
            cli, ['receive', str(port), '--host', LOOPBACK, '-o', str(tmp_path)],
            obj={},
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / 'hello.txt').read_text() == 'mine'
        downloads = list(tmp_path.glob('peerlink-download-*'))
        assert len(downloads) == 1
        assert downloads[0].read_bytes() == b'theirs'

    def test_receive_connection_refused(self, tmp_path):
        code = CodeAllocator(host=LOOPBACK).generate_code()

        result = CliRunner().invoke(
            cli, ['receive', str(code), '--host', LOOPBACK, '-o', str(tmp_path)],
            obj={},
        )

        assert result.exit_code == 1

    def test_receive_rejects_out_of_range_code(self):
        result = CliRunner().invoke(cli, ['receive', '70000'], obj={})
        assert result.exit_code == 2

"""Unit tests for the command-line interface."""

import re

from click.testing import CliRunner

from gatehouse.cli import cli, generate_secret, write_secret_to_env


def test_generate_secret_is_128_hex_chars():
    secret = generate_secret()

    assert re.fullmatch(r"[0-9a-f]{128}", secret)
    assert generate_secret() != secret


def test_write_secret_replaces_existing_line(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text('GATEHOUSE_DEBUG=true\nGATEHOUSE_SECRET_KEY="old"\n')

    write_secret_to_env(env_file, "new")

    assert env_file.read_text() == 'GATEHOUSE_DEBUG=true\nGATEHOUSE_SECRET_KEY="new"\n'


def test_write_secret_seeds_from_example(tmp_path):
    env_file = tmp_path / ".env"
    example = tmp_path / ".env.example"
    example.write_text("GATEHOUSE_DEBUG=false")

    write_secret_to_env(env_file, "abc", example_path=example)

    assert env_file.read_text() == 'GATEHOUSE_DEBUG=false\nGATEHOUSE_SECRET_KEY="abc"\n'


def test_generate_secret_command_prints_secret():
    result = CliRunner().invoke(cli, ["generate-secret"])

    assert result.exit_code == 0
    assert re.fullmatch(r"[0-9a-f]{128}\n", result.output)


def test_generate_secret_command_writes_env_file(tmp_path):
    env_file = tmp_path / ".env"

    result = CliRunner().invoke(cli, ["generate-secret", "--write", str(env_file)])

    assert result.exit_code == 0
    assert re.fullmatch(r'GATEHOUSE_SECRET_KEY="[0-9a-f]{128}"\n', env_file.read_text())

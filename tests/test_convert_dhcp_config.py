import json

from convert_dhcp_config import EXIT_INVALID_CONFIG, EXIT_OK, EXIT_USAGE, main


def test_prints_powershell(tmp_path, capsys, office_config):
    config_file = tmp_path / "dhcpd.conf"
    config_file.write_text(office_config)

    assert main([str(config_file)]) == EXIT_OK

    out = capsys.readouterr().out
    assert out.splitlines()[0].startswith("Add-DhcpServerv4Scope -Name 'Office'")
    assert len(out.splitlines()) == 3


def test_writes_json_file(tmp_path, full_config):
    config_file = tmp_path / "dhcpd.conf"
    config_file.write_text(full_config)
    output = tmp_path / "commands.json"

    assert main([str(config_file), "--format", "json", "--output", str(output)]) == EXIT_OK

    data = json.loads(output.read_text())
    assert data["option_119_defined"] is True
    assert len(data["commands"]) == 8
    assert any("ntp-servers" in w for w in data["warnings"])


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.conf")]) == EXIT_USAGE
    assert "File not found" in capsys.readouterr().err


def test_invalid_config(tmp_path, capsys):
    config_file = tmp_path / "dhcpd.conf"
    config_file.write_text("shared-network broken {\n")

    assert main([str(config_file)]) == EXIT_INVALID_CONFIG

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "line 1" in captured.err

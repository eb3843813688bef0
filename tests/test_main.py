import pytest

import main


def test_missing_port_is_usage_error(capsys):
    with pytest.raises(SystemExit) as info:
        main.parse_args([])
    assert info.value.code != 0
    assert "usage" in capsys.readouterr().err


def test_defaults():
    args = main.parse_args(["8080"])
    assert args.port == 8080
    assert args.match_policy == "hostname"
    assert not args.serial


def test_unopenable_log_file_is_fatal(tmp_path, capsys):
    bad = str(tmp_path / "no-such-dir" / "proxy.log")
    assert main.main(["0", "--log-file", bad]) == 1
    assert "Error opening log file" in capsys.readouterr().err

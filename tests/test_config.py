from mctap.config import Config

def test_missing_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "proxy.properties"
    config = Config(str(path)).load()

    assert path.exists()
    assert "listen-port=25567" in path.read_text(encoding="utf-8")
    assert config.get_int("listen-port") == 25567
    assert config.get_bool("frame-carry-over") is True

def test_values_and_comments(tmp_path):
    path = tmp_path / "proxy.properties"
    path.write_text(
        "# upstream\n"
        "server-ip = mc.example.net\n"
        "server-port=\n"
        "read-timeout=2.5\n"
        "frame-carry-over=false\n"
        "log-levels=INFO, DEBUG ,\n",
        encoding="utf-8"
    )
    config = Config(str(path)).load()

    assert config.get("server-ip") == "mc.example.net"
    assert config.get("server-port") == ""
    assert config.get_float("read-timeout") == 2.5
    assert config.get_bool("frame-carry-over") is False
    assert config.get_list("log-levels") == ["INFO", "DEBUG"]
    # Not in the file: built-in default
    assert config.get("buffer-size") == "4096"
    assert config.get("nope", "fallback") == "fallback"

def test_bad_numbers_fall_back(tmp_path):
    config = Config(str(tmp_path / "p.properties"))
    config.set("buffer-size", "lots")
    assert config.get_int("buffer-size", 1024) == 1024
    assert config.get_float("buffer-size", 1.0) == 1.0


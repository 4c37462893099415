import pytest

from netpulse.config import (
    DEFAULT_INTERVAL,
    DEFAULT_TIMEOUT,
    DEFAULT_URL,
    Attribution,
    ConfigError,
    MonitorConfig,
    build_config,
    load_config,
    parse_attribution,
    parse_duration,
)


class TestParseDuration:
    @pytest.mark.parametrize("text,expected", [
        ("2s", 2.0),
        ("500ms", 0.5),
        ("1m", 60.0),
        ("1m30s", 90.0),
        ("1h30m", 5400.0),
        ("1.5h", 5400.0),
        ("3", 3.0),
        ("0.25", 0.25),
        (7, 7.0),
        (1.5, 1.5),
    ])
    def test_valid(self, text, expected):
        assert parse_duration(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "abc", "5x", "s", "2s junk", "1m 30s", True])
    def test_invalid(self, text):
        with pytest.raises(ConfigError):
            parse_duration(text)


class TestAttribution:
    def test_parse(self):
        assert parse_attribution("current") is Attribution.CURRENT
        assert parse_attribution(" PREVIOUS ") is Attribution.PREVIOUS

    def test_parse_invalid(self):
        with pytest.raises(ConfigError, match="current|previous"):
            parse_attribution("both")


class TestBuildConfig:
    def test_defaults(self):
        cfg = build_config()
        assert cfg == MonitorConfig(DEFAULT_INTERVAL, DEFAULT_URL, DEFAULT_TIMEOUT, Attribution.CURRENT)
        assert cfg.interval == 2.0
        assert cfg.timeout == 5.0
        assert cfg.url == "https://www.google.com"

    def test_overrides_win_over_file_and_none_is_unset(self):
        cfg = build_config({"interval": 10.0, "url": "http://a.example"}, interval=3.0, url=None)
        assert cfg.interval == 3.0
        assert cfg.url == "http://a.example"

    @pytest.mark.parametrize("kwargs", [
        {"interval": 0},
        {"interval": -1.0},
        {"timeout": 0},
        {"url": "ftp://example.com"},
        {"url": "example.com"},
        {"url": "http://[::1"},
        {"interval": 0.001},
        {"interval": 1e300},
        {"interval": float("nan")},
        {"timeout": 7200.0},
        {"timeout": float("inf")},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            build_config(**kwargs)


class TestLoadConfig:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "netpulse.yaml"
        path.write_text("interval: 10s\nurl: https://example.com\ntimeout: 1500ms\nattribution: previous\n")
        values = load_config(str(path))
        assert values == {
            "interval": 10.0,
            "url": "https://example.com",
            "timeout": 1.5,
            "attribution": Attribution.PREVIOUS,
        }

    def test_partial_file_only_returns_present_keys(self, tmp_path):
        path = tmp_path / "netpulse.yaml"
        path.write_text("timeout: 3\n")
        assert load_config(str(path)) == {"timeout": 3.0}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "nope.yaml"))

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "netpulse.yaml"
        path.write_text("targets: []\n")
        with pytest.raises(ConfigError, match="Unknown config key"):
            load_config(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "netpulse.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "netpulse.yaml"
        path.write_text("interval: [2s\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(str(path))

    def test_directory_is_config_error(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(str(tmp_path))

    def test_not_utf8_is_config_error(self, tmp_path):
        path = tmp_path / "netpulse.yaml"
        path.write_bytes(b"interval: 2s\nurl: \xc3\x28\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_huge_integer_duration(self, tmp_path):
        path = tmp_path / "netpulse.yaml"
        path.write_text("interval: " + "9" * 400 + "\n")
        with pytest.raises(ConfigError, match="out of range"):
            load_config(str(path))

import pytest

from cleanpath.config import FilterConfig, load_config, parse_config_obj, resolve_config
from cleanpath.errors import ConfigError


def test_parse_config_obj_reads_known_keys():
    s = parse_config_obj(
        {
            "delimiter": ";",
            "dirs_only": True,
            "shell": "csh",
            "verbosity": 2,
            "exclude": ["/opt/old"],
            "unset": {"name_starts": ["LD_"]},
        },
        source="cfg.yaml",
    )
    assert s.values == {"delimiter": ";", "dirs_only": True, "shell": "csh", "verbosity": 2}
    assert s.exclude == ("/opt/old",)
    assert s.unset["name_starts"] == ("LD_",)
    assert s.unset["value_ends"] == ()


def test_parse_config_obj_rejects_bad_types():
    with pytest.raises(ConfigError):
        parse_config_obj({"delimiter": "::"}, source="cfg.yaml")
    with pytest.raises(ConfigError):
        parse_config_obj({"exclude": "/opt"}, source="cfg.yaml")
    with pytest.raises(ConfigError):
        parse_config_obj({"check_exists": "yes"}, source="cfg.yaml")
    with pytest.raises(ConfigError):
        parse_config_obj({"shell": "fish"}, source="cfg.yaml")
    with pytest.raises(ConfigError):
        parse_config_obj({"unset": {"name_begins": ["X"]}}, source="cfg.yaml")


def test_load_config_yaml(tmp_path):
    p = tmp_path / "cleanpath.yaml"
    p.write_text("remove_dupes: false\nexclude:\n  - /snap\n", encoding="utf-8")
    s = load_config(p)
    assert s.values == {"remove_dupes": False}
    assert s.exclude == ("/snap",)


def test_load_config_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")
    bad = tmp_path / "bad.yaml"
    bad.write_text("exclude: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(bad)


def test_resolve_config_uses_env_var(tmp_path):
    p = tmp_path / "c.yaml"
    p.write_text("dirs_only: true\n", encoding="utf-8")
    assert resolve_config(None, {"CLEANPATH_CONFIG": str(p)}).values == {"dirs_only": True}
    assert resolve_config(None, {}).values == {}


def test_filter_config_delimiter_must_be_one_char():
    with pytest.raises(ConfigError):
        FilterConfig(delimiter="")

import os

import pytest

from cleanpath.cli import main, unsetenvs_main
from cleanpath.errors import UsageError
from cleanpath.normalizer import PathNormalizer


def _run(entry, argv):
    with pytest.raises(SystemExit) as exc:
        entry(argv)
    return exc.value.code


@pytest.fixture(autouse=True)
def _no_config(monkeypatch):
    monkeypatch.delenv("CLEANPATH_CONFIG", raising=False)


def test_delimiter_override(monkeypatch, capsys):
    monkeypatch.setenv("FOO", "a;b;a")
    assert _run(main, ["-n", "-eu", "-d;", "FOO"]) == 0
    assert capsys.readouterr().out == "FOO='a;b'\n"


def test_cleans_path_by_default(monkeypatch, capsys, tmp_path):
    good = tmp_path / "bin"
    good.mkdir()
    good.chmod(0o755)
    monkeypatch.setenv("PATH", f"{good}:{good}:{tmp_path / 'nonexistent'}:{good}")
    assert _run(main, []) == 0
    assert capsys.readouterr().out == f"export PATH={good}\n"


def test_unchanged_variables_are_quiet_unless_asked(monkeypatch, capsys):
    monkeypatch.setenv("FOO", "a:b")
    assert _run(main, ["-eu", "FOO"]) == 0
    assert capsys.readouterr().out == ""
    assert _run(main, ["-euI", "-c", "FOO"]) == 0
    assert capsys.readouterr().out == 'setenv FOO "a:b";\n'


def test_unset_variable_is_skipped(monkeypatch, capsys):
    monkeypatch.delenv("NOT_THERE", raising=False)
    assert _run(main, ["-I", "NOT_THERE"]) == 0
    assert capsys.readouterr().out == ""


def test_exclusions_repeatable(monkeypatch, capsys):
    monkeypatch.setenv("FOO", "/a/old:/b:/c/tmp:/d")
    assert _run(main, ["-eu", "-E", "old", "-Etmp", "-n", "FOO"]) == 0
    assert capsys.readouterr().out == "FOO=/b:/d\n"


def test_verbose_output_goes_to_stdout_as_comments(monkeypatch, capsys):
    monkeypatch.setenv("FOO", "a:a")
    assert _run(main, ["-euVvv", "-n", "FOO"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert "FOO=a" in out
    assert '# Ignoring duplicate file or directory "a"' in out


def test_verbose_output_defaults_to_stderr(monkeypatch, capsys):
    monkeypatch.setenv("FOO", "a:a")
    assert _run(main, ["-eu", "-vvv", "FOO"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "export FOO=a\n"
    assert 'OLD FOO="a:a"' in captured.err
    assert 'NEW FOO="a"' in captured.err


def test_usage_errors_exit_2(monkeypatch, capsys):
    assert _run(main, ["-Z"]) == 2
    assert _run(main, ["-d"]) == 2
    assert _run(main, ["-d::"]) == 2


def test_help_and_version_exit_0(capsys):
    assert _run(main, ["-?"]) == 0
    assert "usage: cleanpath" in capsys.readouterr().out
    assert _run(main, ["--version"]) == 0


def test_config_file_supplies_defaults(monkeypatch, capsys, tmp_path):
    cfg = tmp_path / "cleanpath.yaml"
    cfg.write_text(
        "check_exists: false\nonly_executable_dirs: false\nshell: none\nexclude: [junk]\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("FOO", "a:junk:b:a")
    assert _run(main, ["--config", str(cfg), "FOO"]) == 0
    assert capsys.readouterr().out == "FOO=a:b\n"
    # a toggle flips the configured value
    assert _run(main, ["--config", str(cfg), "-r", "FOO"]) == 0
    assert capsys.readouterr().out == "FOO=a:b:a\n"


def test_bad_config_is_fatal(capsys, tmp_path):
    assert _run(main, ["--config", str(tmp_path / "missing.yaml")]) == 1
    err = capsys.readouterr().err
    assert "[cleanpath] FATAL ERROR: config file not found" in err
    assert "[cleanpath] PROGRAM MUST TERMINATE. Exiting 1." in err


def test_unsetenvs_name_starts(monkeypatch, capsys):
    monkeypatch.setenv("LD_LIBRARY_PATH", "/opt/lib")
    assert _run(unsetenvs_main, ["-s", "LD_"]) == 0
    assert "unset LD_LIBRARY_PATH" in capsys.readouterr().out.splitlines()


def test_unsetenvs_value_ends_csh(monkeypatch, capsys):
    monkeypatch.setenv("CLEANPATH_TEST_VAR", "/some/where/zz-marker-zz")
    assert _run(unsetenvs_main, ["-c", "-E", "zz-marker-zz"]) == 0
    assert capsys.readouterr().out.splitlines() == ["unsetenv CLEANPATH_TEST_VAR;"]


def test_unsetenvs_verbose_is_commented(monkeypatch, capsys):
    monkeypatch.setenv("CLEANPATH_TEST_VAR", "1")
    assert _run(unsetenvs_main, ["-V", "-v", "-m", "CLEANPATH_TEST"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert "unset CLEANPATH_TEST_VAR" in out
    assert "# 'CLEANPATH_TEST_VAR' matched 'CLEANPATH_TEST'" in out


def test_undecodable_bytes_pass_through(monkeypatch, capsysbinary):
    monkeypatch.setitem(os.environb, b"FOO", b"/opt/caf\xe9/bin:/opt/caf\xe9/bin")
    assert _run(main, ["-eu", "FOO"]) == 0
    assert capsysbinary.readouterr().out == b"export FOO='/opt/caf\xe9/bin'\n"


def test_unsetenvs_reemits_undecodable_values(monkeypatch, capsysbinary):
    monkeypatch.setitem(os.environb, b"CLEANPATH_TEST_VAR", b"caf\xe9")
    assert _run(unsetenvs_main, ["-I", "-n"]) == 0
    assert b"CLEANPATH_TEST_VAR='caf\xe9'" in capsysbinary.readouterr().out.splitlines()


def test_out_of_memory_is_fatal(monkeypatch, capsys):
    def no_memory(self, raw):
        raise MemoryError

    monkeypatch.setattr(PathNormalizer, "normalize", no_memory)
    monkeypatch.setenv("FOO", "a")
    assert _run(main, ["FOO"]) == 1
    err = capsys.readouterr().err
    assert "[cleanpath] FATAL ERROR: Out of memory." in err
    assert "[cleanpath] PROGRAM MUST TERMINATE. Exiting 1." in err


def test_keyboard_interrupt_exits_130(monkeypatch):
    def interrupted(self, raw):
        raise KeyboardInterrupt

    monkeypatch.setattr(PathNormalizer, "normalize", interrupted)
    monkeypatch.setenv("FOO", "a")
    assert _run(main, ["FOO"]) == 130


def test_usage_error_exits_2(monkeypatch, capsys):
    def bad_usage(self, raw):
        raise UsageError("bad target")

    monkeypatch.setattr(PathNormalizer, "normalize", bad_usage)
    monkeypatch.setenv("FOO", "a")
    assert _run(main, ["FOO"]) == 2
    err = capsys.readouterr().err
    assert "[cleanpath] FATAL ERROR: bad target" in err
    assert "[cleanpath] PROGRAM MUST TERMINATE. Exiting 2." in err


def test_unset_variable_logged_at_verbosity_3(monkeypatch, capsys):
    monkeypatch.delenv("NOT_THERE", raising=False)
    assert _run(main, ["-vvv", "NOT_THERE"]) == 0
    assert 'OLD NOT_THERE="" # was unset' in capsys.readouterr().err.splitlines()


def test_c_comment_style(monkeypatch, capsys):
    monkeypatch.setenv("FOO", "a:a")
    assert _run(main, ["-eu", "-vv", "--comment-style", "c", "FOO"]) == 0
    err = capsys.readouterr().err.splitlines()
    assert '/* Ignoring duplicate file or directory "a" */' in err


def test_all_path_variables(monkeypatch, capsys):
    monkeypatch.setenv("CLEANPATH_TESTPATH", "x:x")
    monkeypatch.setenv("CLEANPATH_TESTPATHS", "y:y")
    assert _run(main, ["-euA", "-n"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert "CLEANPATH_TESTPATH=x" in out
    assert not any(line.startswith("CLEANPATH_TESTPATHS=") for line in out)


def test_common_path_variables(monkeypatch, capsys):
    monkeypatch.setenv("MANPATH", "m:m")
    monkeypatch.setenv("CLEANPATH_NOT_COMMON", "z:z")
    assert _run(main, ["-euC", "-n"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert "MANPATH=m" in out
    assert not any(line.startswith("CLEANPATH_NOT_COMMON=") for line in out)

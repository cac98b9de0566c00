"""コマンドラインエントリーポイントのテスト。"""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

from leakcheck.config import Config
from leakcheck.main import LeakChecker, main


def _write_crate(root: Path, files: dict) -> Path:
    for name, content in files.items():
        path = root / "src" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


CRATE = {
    "lib.rs": "obs_get_version(); obs_source_create(); obs_source_release();",
    "output.rs": "obs_output_create(); obs_get_version(); obs_get_version();",
    "encoders/video.rs": "obs_video_encoder_create(); obs_encoder_release();",
}


class TestLeakChecker:
    """LeakCheckerのテスト。"""

    def test_run(self):
        """スキャンからレポート作成までのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), CRATE)

            checker = LeakChecker(Config())
            report = checker.run(root)

            assert report.files_scanned == 3
            assert report.leaks == ("obs_output_create",)
            assert report.leftover == (
                "obs_get_version",
                "obs_get_version",
                "obs_get_version",
            )
            assert checker.stats.symbols == 8
            assert checker.stats.leaks == 1

    def test_unclassified_symbol_is_leftover(self):
        """どのルールにも該当しないシンボルがleftoverになることのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {"lib.rs": "obs_get_version();"})

            report = LeakChecker(Config()).run(root)

            assert report.leftover == ("obs_get_version",)
            assert report.leaks == ()

    def test_symlinked_directory_is_not_followed(self):
        """シンボリックリンクのディレクトリを再度走査しないことのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {"lib.rs": "obs_get_version();"})
            (root / "src" / "loop").symlink_to(root / "src", target_is_directory=True)

            report = LeakChecker(Config()).run(root)

            assert report.files_scanned == 1
            assert report.leftover == ("obs_get_version",)

    def test_run_twice_is_identical(self):
        """同じツリーに対する2回の実行結果が一致することのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), CRATE)
            checker = LeakChecker(Config(max_workers=4))

            assert checker.run(root) == checker.run(root)


class TestMain:
    """main関数のテスト。"""

    def test_leaks_found(self, capsys):
        """リークがある場合の出力と終了コードのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), CRATE)

            code = main([str(root)])
            out = capsys.readouterr().out

            assert code == 2
            assert out == (
                "Leftover matches:\n"
                " obs_get_version, obs_get_version, obs_get_version\n"
                "Found memory leaks:\n"
                "obs_output_create\n"
            )

    def test_no_leaks(self, capsys):
        """リークがない場合の終了コードのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {
                "lib.rs": "obs_foo_create(); obs_foo_release();",
            })

            code = main([str(root)])

            assert code == 0
            assert capsys.readouterr().out.endswith(
                "No memory leaks found (hopefully).\n"
            )

    def test_no_fail_on_leaks(self):
        """--no-fail-on-leaks指定時に終了コードが0になることのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {"lib.rs": "obs_foo_create();"})

            assert main([str(root), "--no-fail-on-leaks"]) == 0

    def test_directory_relative_to_anchor(self, capsys):
        """anchorからの相対パスで対象を指定するテスト。"""
        with TemporaryDirectory() as tmpdir:
            _write_crate(Path(tmpdir) / "crate", {"lib.rs": "obs_foo_create();"})

            code = main(["crate", "--anchor", tmpdir])

            assert code == 2
            assert "obs_foo_create" in capsys.readouterr().out

    def test_json_format(self, capsys):
        """JSON形式の出力のテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), CRATE)

            main([str(root), "--format", "json"])
            data = json.loads(capsys.readouterr().out)

            assert data["leaks"] == ["obs_output_create"]
            assert data["files_scanned"] == 3

    def test_missing_directory(self, capsys):
        """存在しないディレクトリで致命的エラーになることのテスト。"""
        with TemporaryDirectory() as tmpdir:
            code = main([str(Path(tmpdir) / "missing")])
            captured = capsys.readouterr()

            assert code == 1
            assert captured.out == ""
            assert "Directory not found" in captured.err

    def test_prompt_for_directory(self, capsys, monkeypatch):
        """引数がない場合に対象ディレクトリを問い合わせることのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {"lib.rs": "obs_log();"})
            monkeypatch.setattr("builtins.input", lambda prompt: str(root))

            code = main([])

            assert code == 0
            assert "obs_log" in capsys.readouterr().out

    def test_no_directory_provided(self, capsys, monkeypatch):
        """対象ディレクトリが得られない場合のテスト。"""
        def no_input(prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", no_input)

        code = main([])
        captured = capsys.readouterr()

        assert code == 1
        assert captured.out == ""
        assert "No directory provided." in captured.err

    def test_malformed_rule_pattern(self, capsys):
        """不正なルールでスキャン前に失敗することのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {"lib.rs": "obs_foo_create();"})
            rules = Path(tmpdir) / "rules.yaml"
            rules.write_text("rules:\n  - create: 'obs_('\n    release: 'x'\n")

            code = main([str(root), "--rules", str(rules)])

            assert code == 1
            assert capsys.readouterr().out == ""

    def test_unreadable_file_is_reported_as_warning(self, capsys):
        """読み込めないファイルが警告として報告されることのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {"lib.rs": "obs_foo_create();"})
            (root / "src" / "broken.rs").write_bytes(b"\xff\xfeobs_bar_create(")

            code = main([str(root)])
            captured = capsys.readouterr()

            assert code == 2
            assert "obs_bar_create" not in captured.out
            assert "Warnings (1):" in captured.err

    def test_print_config(self, capsys, monkeypatch):
        """--print-configで有効な設定がYAMLで出力されることのテスト。"""
        monkeypatch.delenv("LEAKCHECK_PREFIX", raising=False)

        code = main(["crate", "--prefix", "gs_", "--print-config"])
        out = capsys.readouterr().out

        assert code == 0
        assert "target: crate\n" in out
        assert "prefix: gs_\n" in out

    def test_prefix_from_environment_without_config_file(self, capsys, monkeypatch):
        """設定ファイルなしでも環境変数のprefixが使われることのテスト。"""
        monkeypatch.setenv("LEAKCHECK_PREFIX", "gs_")
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {
                "lib.rs": "gs_texture_create(); obs_source_create();",
            })

            code = main([str(root)])
            out = capsys.readouterr().out

            assert code == 2
            assert "gs_texture_create" in out
            assert "obs_source_create" not in out

    def test_prefix_option_overrides_environment(self, capsys, monkeypatch):
        """--prefixが環境変数より優先されることのテスト。"""
        monkeypatch.setenv("LEAKCHECK_PREFIX", "gs_")

        main(["crate", "--prefix", "obs_", "--print-config"])

        assert "prefix: obs_\n" in capsys.readouterr().out

    def test_invalid_exclude_dirs_in_config_file(self, capsys):
        """設定ファイルのexclude_dirsが不正な場合に致命的エラーになることのテスト。"""
        with TemporaryDirectory() as tmpdir:
            root = _write_crate(Path(tmpdir), {"lib.rs": "obs_foo_create();"})
            config_file = Path(tmpdir) / "leakcheck.yaml"
            config_file.write_text("exclude_dirs: src\n")

            code = main([str(root), "-c", str(config_file)])
            captured = capsys.readouterr()

            assert code == 1
            assert captured.out == ""
            assert "exclude_dirs must be a list of directory names" in captured.err

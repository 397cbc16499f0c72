from pathlib import Path

from visidiff.main import build_parser, main


def test_dash_marks_absent_side():
    args = build_parser().parse_args(["-", "new.png"])
    assert args.previous is None
    assert args.current == Path("new.png")


def test_no_paths():
    args = build_parser().parse_args([])
    assert args.previous is None and args.current is None
    assert args.log_level == "INFO"


def test_bad_config_exits_with_error(tmp_path):
    config = tmp_path / "bad.json"
    config.write_text("{")
    assert main(["--config", str(config)]) == 2


def test_wrongly_typed_config_exits_with_error(tmp_path):
    config = tmp_path / "typed.json"
    config.write_text('{"highlight_rgba": null}')
    assert main(["--config", str(config)]) == 2

import json

from plugins.graphing_calculator.cli import main


def test_cli_evaluate(capsys):
    assert main(["evaluate", "sin(x)^2 + cos(x)^2", "--x", "0.7"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert abs(payload["result"] - 1.0) < 1e-12
    assert "history_item" not in payload


def test_cli_plot(capsys):
    assert main(["plot", "x", "--width", "100", "--height", "100", "--columns", "3"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["points"] == 3
    assert [point["x"] for point in payload["runs"][0]] == [0.0, 50.0, 100.0]


def test_cli_export_writes_svg(tmp_path, capsys):
    output = tmp_path / "graph.svg"
    assert main(["export", "x^2", "--output", str(output), "--columns", "20"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["output"] == str(output)
    assert output.read_text(encoding="utf-8").startswith("<?xml")


def test_cli_history_round_trip(tmp_path, capsys):
    history = str(tmp_path / "history.enc")
    assert main(["--history", history, "evaluate", "2+2"]) == 0
    capsys.readouterr()
    assert (tmp_path / "history.key").exists()

    assert main(["--history", history, "history", "list"]) == 0
    items = json.loads(capsys.readouterr().out)["items"]
    assert [item["expression"] for item in items] == ["2+2"]

    assert main(["--history", history, "history", "rotate-key"]) == 0
    assert json.loads(capsys.readouterr().out) == {"reencrypted": 1}

    assert main(["--history", history, "history", "clear"]) == 0
    capsys.readouterr()
    assert main(["--history", history, "history", "list"]) == 0
    assert json.loads(capsys.readouterr().out) == {"items": []}


def test_cli_reports_errors(capsys):
    assert main(["evaluate", "1/0"]) == 1
    assert capsys.readouterr().err.startswith("error:")
    assert main(["plot", "x", "--x-min", "1", "--x-max", "1"]) == 1

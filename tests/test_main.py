import json

from main import build_parser, kernel_options, main
from chaosmaps.config import get_config
from chaosmaps.schema import MapType


def _run(capsys, argv):
    code = main(argv)
    return code, capsys.readouterr().out


def test_parser_requires_known_map_type():
    parser = build_parser()
    args = parser.parse_args(["validate", "henon", "--params", "{}"])
    assert args.map_type == "henon"


def test_ranges_command(capsys):
    code, out = _run(capsys, ["ranges", "lozi"])
    assert code == 0
    assert json.loads(out)["lozi"]["iterations"] == {"min": 1, "max": 50000}


def test_validate_command_reports_errors(capsys):
    code, out = _run(capsys, ["validate", "lorenz", "--params", '{"sigma": 10}'])
    assert code == 1
    assert json.loads(out)["errors"] == ["Missing required parameters: rho, beta"]


def test_validate_command_reads_file(tmp_path, capsys):
    path = tmp_path / "henon.json"
    path.write_text(json.dumps({"a": 1.4, "b": 0.3, "iterations": 100}), encoding="utf-8")
    code, out = _run(capsys, ["validate", "henon", "--file", str(path)])
    assert code == 0
    assert json.loads(out)["is_valid"] is True


def test_stability_command(capsys):
    code, out = _run(capsys, ["stability", "lorenz", "--params", '{"sigma": 100, "rho": 28, "beta": 2.667}'])
    assert code == 1
    assert json.loads(out)["warnings"] == ["sigma (100) is outside stable range [0, 50]"]


def test_parse_config_command(capsys):
    code, out = _run(capsys, ["parse-config", "henon", "%7B%22a%22%3A1.4%2C%22b%22%3A0.3%2C%22iterations%22%3A10%7D"])
    assert code == 0
    assert json.loads(out)["parameters"] == {"a": 1.4, "b": 0.3, "iterations": 10}


def test_compute_command_writes_output_and_plot(tmp_path, capsys):
    output = tmp_path / "out" / "henon.json"
    code, out = _run(
        capsys,
        ["compute", "henon", "--config", "preview", "--output", str(output), "--plot-dir", str(tmp_path / "plots")],
    )
    assert code == 0
    payload = json.loads(out)
    assert payload["summary"]["shape"] == [2000, 2]
    assert payload["warnings"] == []
    saved = json.loads(output.read_text(encoding="utf-8"))
    assert len(saved["output"]) == 2000
    assert list((tmp_path / "plots").glob("henon_*.png"))


def test_compute_command_rejects_invalid_params(capsys):
    code, out = _run(capsys, ["compute", "henon", "--params", '{"a": "x"}'])
    assert code == 1
    assert "errors" in json.loads(out)


def test_compute_lyapunov_summary(capsys):
    code, out = _run(capsys, ["compute", "lyapunov", "--config", "preview"])
    assert code == 0
    summary = json.loads(out)["summary"]
    assert summary["samples"] == 100


def test_compare_url_command(capsys):
    code, out = _run(capsys, ["compare-url", "henon", "--base", "https://maps.test"])
    assert code == 0
    assert out.startswith("https://maps.test/henon/compare?compare=true&left=")


def test_kernel_options_follow_config():
    cfg = get_config("preview")
    assert kernel_options(MapType.NEWTON, cfg) == {"width": 200, "height": 150}
    assert kernel_options(MapType.STANDARD, cfg) == {"max_points": 10_000}
    assert kernel_options(MapType.HENON, cfg) == {}


def test_load_command_with_inline_config(capsys):
    param = "%7B%22sigma%22%3A100%2C%22rho%22%3A28%2C%22beta%22%3A2.667%7D"
    code, out = _run(capsys, ["load", "lorenz", "--config-param", param])
    assert code == 0
    payload = json.loads(out)
    assert payload["parameters"] == {"sigma": 100, "rho": 28, "beta": 2.667}
    assert payload["warnings"] == ["sigma (100) is outside stable range [0, 50]"]


def test_load_command_reports_errors(capsys):
    code, out = _run(capsys, ["load", "lorenz", "--config-param", "%7B%22sigma%22%3A10%7D"])
    assert code == 1
    assert json.loads(out)["errors"] == ["Missing required parameters: rho, beta"]

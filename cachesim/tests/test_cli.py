import json

import pytest
from cachesim.cli import main

TRACE = """0x400: R 0x0
0x404: R 0x4
this line is garbage
0x408: R 0x0
#eof
0x40c: R 0x100
"""


@pytest.fixture
def trace_file(tmp_path):
    path = tmp_path / "sample.trace"
    path.write_text(TRACE)
    return str(path)


def test_prints_both_runs(trace_file, capsys):
    assert main(["32", "direct", "fifo", "4", trace_file]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "Prefetch 0",
        "Memory reads: 2",
        "Memory writes: 0",
        "Cache hits: 1",
        "Cache misses: 2",
        "Prefetch 1",
        "Memory reads: 2",
        "Memory writes: 0",
        "Cache hits: 2",
        "Cache misses: 1",
    ]


def test_json_export(trace_file, tmp_path, capsys):
    out_path = tmp_path / "out.json"
    assert main(["32", "assoc", "lru", "4", trace_file, "--json", str(out_path)]) == 0
    runs = json.loads(out_path.read_text())['runs']
    assert [r['prefetch'] for r in runs] == [False, True]
    assert runs[0]['misses'] == 2


@pytest.mark.parametrize('args,message', [
    (["30", "direct", "fifo", "4"], "powers of 2"),
    (["32", "direct", "plru", "4"], "Invalid replacement policy"),
    (["32", "assoc:3", "lru", "4"], "Associativity must be a power of 2"),
    (["32", "nway", "lru", "4"], "Invalid associativity"),
    (["32", "assoc:16", "lru", "4"], "does not fit"),
])
def test_invalid_configuration_exits_1(args, message, trace_file, capsys):
    assert main(args + [trace_file]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error:" in captured.err and message in captured.err


def test_unreadable_trace_exits_1(tmp_path, capsys):
    missing = str(tmp_path / "nope.trace")
    assert main(["32", "direct", "lru", "4", missing]) == 1
    assert f"Cannot open trace file {missing}" in capsys.readouterr().err


def test_wrong_argument_count():
    with pytest.raises(SystemExit) as err:
        main(["32", "direct", "lru"])
    assert err.value.code == 2


def test_configuration_error_reported_before_missing_trace(tmp_path, capsys):
    # Input: a geometry the cache rejects together with a trace that does not exist.
    # Expected: the caches are built first, so only the configuration error shows.
    missing = str(tmp_path / "missing.trace")
    assert main(["32", "assoc:16", "lru", "4", missing]) == 1
    err = capsys.readouterr().err
    assert "does not fit" in err
    assert "Cannot open trace file" not in err


def test_csv_chart_and_verbose_exports(trace_file, tmp_path, capsys):
    pytest.importorskip('matplotlib')
    csv_path = tmp_path / "out.csv"
    chart_path = tmp_path / "out.pdf"
    args = ["32", "direct", "fifo", "4", trace_file, "--csv", str(csv_path), "--chart", str(chart_path), "-v"]
    assert main(args) == 0
    rows = csv_path.read_text().splitlines()
    assert rows[0].startswith("prefetch,accesses,hits,misses")
    assert len(rows) == 3
    assert chart_path.read_bytes().startswith(b'%PDF')


def test_export_to_directory_exits_1(trace_file, tmp_path, capsys):
    # a directory cannot be opened for writing
    assert main(["32", "direct", "fifo", "4", trace_file, "--csv", str(tmp_path)]) == 1
    captured = capsys.readouterr()
    assert "Error: Cannot write export" in captured.err
    # the report itself is printed before exporting
    assert captured.out.startswith("Prefetch 0")

import pytest

from kvbench.statics import Statics, format_value, report_thpt


def test_counters_update():
    s = Statics()
    s.increment()
    s.increment()
    s.increment_gap_1(5)
    s.increment_gap_1(2)
    s.set_lat(3.5)
    assert s.counter == 2
    assert s.counter1 == 7
    assert s.lat == 3.5


def test_format_value_precision():
    assert format_value(1.5, 2) == "1.50"
    assert format_value(2) == "2.0000"


def test_format_value_zero_precision_rounds():
    assert float(format_value(7.6, 0).replace(",", "")) == 8.0


def test_report_writes_one_line_per_epoch(tmp_path):
    stats = [Statics(), Statics()]
    stats[0].counter = 500
    stats[1].counter = 300
    log = tmp_path / "thpt.log"
    result = report_thpt(stats, 3, log_file=log, interval=0.01)
    assert result == 0.0
    lines = log.read_text().splitlines()
    assert len(lines) == 3
    assert float(lines[0].replace(",", "")) > 0
    assert float(lines[1].replace(",", "")) == 0
    assert float(lines[2].replace(",", "")) == 0


def test_report_without_log_file(tmp_path):
    assert report_thpt([Statics()], 1, interval=0.0) == 0.0
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("epochs", [0, 2])
def test_report_with_no_statics(tmp_path, epochs):
    log = tmp_path / "empty.log"
    report_thpt([], epochs, log_file=log, interval=0.0)
    assert log.read_text().splitlines() == ["0"] * epochs
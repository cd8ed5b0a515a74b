import pandas as pd
import pytest

from hourlyclim.avgcalc import main


def test_main_prints_report(write_csv, capsys):
    path = write_csv("station.csv", [
        '"01.01.2023 08:00";"10.0";"1000";"2.0";',
        '"01.01.2023 08:30";"20.0";"1000";"4.0";',
    ])
    assert main([str(path)]) == 0

    out = capsys.readouterr().out
    assert out == ("{2023:\n{Jan:\n{8: {T:15.0, W:3.0}}}\n"
                   "\n2023-2023:\n{Jan:\n{8: {T:15.0, W:3.0}}}}\n\n")


def test_main_without_valid_rows(write_csv, capsys):
    first = write_csv("first.csv", ['"not a date";"10.0";"1000";"2.0";'])
    second = write_csv("second.csv", [])

    assert main([str(first), str(second)]) == 0
    assert capsys.readouterr().out == "{}\n\n"


def test_main_skips_broken_files(write_csv, capsys):
    with_bad_row = write_csv("with_bad_row.csv", [
        '"01.01.2023 08:00";"10.0";"1000";"2.0";',
        '"01.01.2023 09:00";"n/a";"1000";"2.0";',
    ])
    unusable = write_csv("unusable.csv", ['01.01.2023 08:00,10.0,2.0'],
                         header='time,T,Ff\n')
    malformed = write_csv("malformed.csv", ['"01.03.2023 08:00;"30.0";"1000";"9.0";'])
    other = write_csv("other.csv", ['"01.02.2024 08:00";"20.0";"1000";"4.0";'])

    assert main([str(with_bad_row), str(unusable), str(malformed), str(other)]) == 1

    out = capsys.readouterr().out
    assert "2023:\n{Jan:\n{8: {T:10.0, W:2.0}}}" in out
    assert "2024:\n{Feb:\n{8: {T:20.0, W:4.0}}}" in out
    assert "2023-2024:" in out
    assert "9: " not in out
    assert "Mar:" not in out


def test_main_accumulate_duplicates(write_csv, capsys):
    first = write_csv("a.csv", ['"01.01.2023 08:00";"10.0";"1000";"2.0";'])
    second = write_csv("b.csv", ['"01.01.2023 08:00";"20.0";"1000";"4.0";'])

    assert main([str(first), str(second), "--duplicates", "accumulate"]) == 0
    assert "{8: {T:15.0, W:3.0}}" in capsys.readouterr().out

    assert main([str(first), str(second)]) == 0
    assert "{8: {T:20.0, W:4.0}}" in capsys.readouterr().out


def test_main_writes_csv(write_csv, tmp_path):
    path = write_csv("station.csv", [
        '"01.01.2022 08:00";"10.0";"1000";"2.0";',
        '"01.01.2023 08:00";"20.0";"1000";"4.0";',
    ])
    output = tmp_path / "results" / "hourly_avg.csv"

    assert main([str(path), "--output-csv", str(output)]) == 0

    frame = pd.read_csv(output)
    assert list(frame["period"]) == ["2022", "2023", "2022-2023"]
    assert frame["temperature"].tolist() == pytest.approx([10.0, 20.0, 15.0])
    assert frame["samples"].tolist() == [1, 1, 2]


def test_main_requires_files(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2
    captured = capsys.readouterr()
    assert "usage:" in captured.err
    assert captured.out == ""

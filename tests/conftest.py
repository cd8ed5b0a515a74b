import pytest

HEADER = '# Meteorological station 27612\n# T - air temperature, Ff - wind speed\n"Local time";"T";"P";"Ff";\n'


@pytest.fixture
def write_csv(tmp_path):
    """ CSV fájl írása a tmp könyvtárba; alapból a szabványos fejléccel """

    def _write(name, rows, header=HEADER):
        path = tmp_path / name
        path.write_text(header + "".join(row + "\n" for row in rows), encoding="utf-8")
        return path

    return _write

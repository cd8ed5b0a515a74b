"""
 csvloader.py

 Pontosvesszővel (;) elválasztott meteorológiai CSV fájlok beolvasása
 Sample listává az avgweather gyűjtői számára.

 A fájlformátum:
  - '#' kezdetű sorok megjegyzések
  - az első (nem megjegyzés) sor a fejléc, a hőmérséklet ('T') és a
    szélsebesség ('Ff') oszlopát a neve alapján keressük
  - a 0. oszlop az időbélyeg 'DD.MM.YYYY HH:MM' formátumban (UTC-nek tekintjük)

 Hibakezelés: a hibás sorokat naplózzuk és kihagyjuk, a fájl egészét érintő
 hibáknál (nem nyitható meg, nem értelmezhető, hiányzó oszlop) a fájlt
 hagyjuk ki, a feldolgozás a többi fájllal folytatódik.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from .avgweather import Sample

logger = logging.getLogger(__name__)

TIME_COLUMN = 0
TIME_FORMAT = '%d.%m.%Y %H:%M'
TEMPERATURE_ID = 'T'
WIND_ID = 'Ff'
DEFAULT_ENCODING = 'utf-8-sig'
DUPLICATE_POLICIES = ('overwrite', 'accumulate')


class SourceError(Exception):
    """ Egy bemeneti fájl egészében feldolgozhatatlan """

    def __init__(self, path, reason):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class ColumnLayout:
    """ A fejléc vizsgálatának eredménye: oszlopindexek vagy None, ha nincs ilyen oszlop """
    temperature: Optional[int]
    wind: Optional[int]
    temperature_id: str = TEMPERATURE_ID
    wind_id: str = WIND_ID

    @property
    def missing(self):
        names = []
        if self.temperature is None:
            names.append(self.temperature_id)
        if self.wind is None:
            names.append(self.wind_id)
        return names


@dataclass
class LoadResult:
    samples: List[Sample] = field(default_factory=list)
    files_read: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    rejected_rows: int = 0
    overwritten: int = 0


def locate_columns(header, temperature_id=TEMPERATURE_ID, wind_id=WIND_ID):
    # azonos nevű oszlopoknál az utolsó előfordulás nyer
    temperature = None
    wind = None
    for index, entry in enumerate(header):
        if pd.isna(entry):
            continue
        entry = str(entry).strip()
        if entry == temperature_id:
            temperature = index
        elif entry == wind_id:
            wind = index
    return ColumnLayout(temperature, wind, temperature_id, wind_id)


"""
 Beolvassa a fájlt nyers szöveges táblázatként (fejléc a 0. sorban).
 Csak a '#' karakterrel kezdődő sorok megjegyzések, a mezőkön belüli '#' adat.
 Üres (vagy csak megjegyzést tartalmazó) fájl esetén None-t ad vissza.
"""
def read_table(path, encoding=DEFAULT_ENCODING):

    options = dict(sep=';', header=None, dtype=str,
                   keep_default_na=False, skip_blank_lines=True,
                   engine='python')
    try:
        with open(path, encoding=encoding, newline='') as fh:
            text = "".join(line for line in fh if not line.startswith('#'))
        # a fejléc szélessége határozza meg az oszlopok számát
        head = pd.read_csv(io.StringIO(text), nrows=1, **options)
        width = head.shape[1]
        # a fejlécnél hosszabb sorok levágása (csak az első 'width' mező kell)
        table = pd.read_csv(io.StringIO(text), on_bad_lines=lambda fields: fields[:width], **options)
    except pd.errors.EmptyDataError:
        return None
    except OSError as e:
        raise SourceError(path, f"nem nyitható meg ({e})") from e
    except (pd.errors.ParserError, csv.Error, UnicodeDecodeError) as e:
        raise SourceError(path, f"nem értelmezhető CSV ({e})") from e

    return table


def parse_numbers(raw):
    # szóközzel körülvett érték és a 'NaN' / 'inf' szöveg is hibás mérésnek számít
    values = pd.to_numeric(raw, errors='coerce')
    text = raw.astype(str)
    padded = raw.notna() & (text.str.strip() != text)
    return values.mask(padded | values.isin([np.inf, -np.inf]))


"""
 Egy fájl mintáinak beolvasása.

 Returns:
    (samples, rejected): az érvényes minták listája és a kihagyott sorok száma

 Raises:
    SourceError: ha a fájl egésze feldolgozhatatlan
"""
def load_samples(path, temperature_id=TEMPERATURE_ID, wind_id=WIND_ID,
                 time_format=TIME_FORMAT, encoding=DEFAULT_ENCODING):

    table = read_table(path, encoding)
    if table is None or table.empty:
        logger.info(f"{path}: üres fájl, nincs feldolgozható sor")
        return [], 0

    layout = locate_columns(table.iloc[0], temperature_id, wind_id)
    if layout.missing:
        raise SourceError(path, f"hiányzó oszlop(ok) a fejlécben: {', '.join(layout.missing)}")

    data = table.iloc[1:]

    # vektorizált konverzió, a hibás értékekből NaT / NaN lesz
    stamps = pd.to_datetime(data[TIME_COLUMN], format=time_format, errors='coerce', utc=True)
    temperatures = parse_numbers(data[layout.temperature])
    winds = parse_numbers(data[layout.wind])

    samples = []
    rejected = 0
    rows = zip(stamps, data[layout.temperature], temperatures, data[layout.wind], winds)
    for entry, (stamp, raw_temperature, temperature, raw_wind, wind) in enumerate(rows, start=1):
        if pd.isna(stamp):
            logger.warning(f"{path}: a(z) #{entry}. bejegyzés dátuma nem értelmezhető")
        elif pd.isna(raw_temperature):
            logger.warning(f"{path}: hiányos (ill-formed) bejegyzés #{entry}")
        elif pd.isna(temperature):
            logger.warning(f"{path}: a(z) #{entry}. bejegyzés hőmérséklete nem értelmezhető")
        elif pd.isna(raw_wind):
            logger.warning(f"{path}: hiányos (ill-formed) bejegyzés #{entry}")
        elif pd.isna(wind):
            logger.warning(f"{path}: a(z) #{entry}. bejegyzés szélsebessége nem értelmezhető")
        else:
            samples.append(Sample(stamp.to_pydatetime(), np.float32(temperature), np.float32(wind)))
            continue
        rejected += 1

    logger.info(f"{path}: {len(samples)} minta beolvasva, {rejected} sor kihagyva")
    return samples, rejected


"""
 Az összes bemeneti fájl beolvasása egyetlen mintahalmazba.

 duplicates:
    'overwrite'  - azonos időbélyegnél a később beolvasott sor felülírja a korábbit
                   (fájlokon átívelően is)
    'accumulate' - minden érvényes sor külön mintaként kerül az átlagba
"""
def collect_samples(paths, temperature_id=TEMPERATURE_ID, wind_id=WIND_ID,
                    time_format=TIME_FORMAT, encoding=DEFAULT_ENCODING,
                    duplicates='overwrite'):

    if duplicates not in DUPLICATE_POLICIES:
        raise ValueError(f"ismeretlen duplikátum kezelés: {duplicates!r}")

    result = LoadResult()
    by_time = {}

    for path in paths:
        try:
            samples, rejected = load_samples(path, temperature_id, wind_id, time_format, encoding)
        except SourceError as e:
            logger.error(f"{e} - a fájlt kihagyom")
            result.skipped.append(str(path))
            continue

        result.files_read.append(str(path))
        result.rejected_rows += rejected

        if duplicates == 'accumulate':
            result.samples.extend(samples)
            continue

        for sample in samples:
            if sample.timestamp in by_time:
                result.overwritten += 1
            by_time[sample.timestamp] = sample

    if duplicates == 'overwrite':
        result.samples = list(by_time.values())
        if result.overwritten:
            logger.info(f"{result.overwritten} azonos időbélyegű sor felülírva")

    return result

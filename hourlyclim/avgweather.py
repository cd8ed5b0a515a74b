"""
 avgweather.py

 Órás átlaghőmérséklet és átlagos szélsebesség gyűjtése év -> hónap -> óra
 bontásban, valamint egy évektől független (hónap -> óra) összesítésben.

 A gyűjtők csak azokat a kulcsokat tartalmazzák, amelyekre már érkezett minta
 (ritka szerkezet), ezért a riport csak kitöltött gyűjtőket jár be.

 Működési elv:
 1. Minden mintából UTC szerint képezzük az (év, hónap, óra) kulcsot
 2. Az évenkénti és az összesített fában is megkeressük / létrehozzuk a levelet
 3. A levél hőmérséklet és szél futóátlagához hozzáadjuk az értékeket
 4. Riport: évek, hónapok, órák növekvő sorrendben, 1 tizedesre kerekítve
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np
import pandas as pd

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

FRAME_COLUMNS = ["period", "year", "month", "hour", "temperature", "wind", "samples"]


class EmptyBucketError(ValueError):
    """ Átlag lekérdezése olyan gyűjtőből, amibe még nem került érték """


class AggregatorClosedError(RuntimeError):
    """ Minta rögzítése a riport elkészülte után """


@dataclass(frozen=True)
class Sample:
    """ Egy időbélyeges mérés (hőmérséklet °C, szélsebesség m/s) """
    timestamp: datetime
    temperature: np.float32
    wind_speed: np.float32


def utc_time(timestamp):
    # naiv időpont -> UTC-nek tekintjük
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


class RunningAverage:
    """ Futóátlag: összeg és darabszám, csak növekedhet """

    def __init__(self):
        self.total = 0.0
        self.count = 0

    def add(self, value):
        self.total += float(value)
        self.count += 1

    def mean(self):
        if self.count == 0:
            raise EmptyBucketError("üres gyűjtő átlaga nem értelmezett")
        return self.total / self.count

    def __repr__(self):
        return f"RunningAverage(total={self.total!r}, count={self.count})"


class HourBucket:
    """ Egy adott óra (0-23) hőmérséklet és szél futóátlaga """

    def __init__(self):
        self.temperature = RunningAverage()
        self.wind = RunningAverage()

    @property
    def count(self):
        return self.temperature.count

    def mean(self):
        """ (átlaghőmérséklet, átlagos szélsebesség) float32 pontossággal """
        return np.float32(self.temperature.mean()), np.float32(self.wind.mean())

    def __str__(self):
        temperature, wind = self.mean()
        return f"{{T:{temperature:.1f}, W:{wind:.1f}}}"


class _SparseBucket:
    # közös alap: egész kulcs -> gyermek gyűjtő, csak find-or-create bővítheti
    key_range = range(0)
    key_name = "key"

    def __init__(self):
        self._children = {}

    def _find_or_create(self, key):
        if key not in self.key_range:
            raise ValueError(f"érvénytelen {self.key_name}: {key!r}")
        child = self._children.get(key)
        if child is None:
            child = self._new_child()
            self._children[key] = child
        return child

    def _new_child(self):
        raise NotImplementedError

    def get(self, key):
        return self._children.get(key)

    def keys(self):
        return sorted(self._children)

    def items(self):
        return [(key, self._children[key]) for key in self.keys()]

    def __contains__(self, key):
        return key in self._children

    def __len__(self):
        return len(self._children)


class MonthBucket(_SparseBucket):
    """ Egy hónap órás gyűjtői (óra -> HourBucket) """
    key_range = range(24)
    key_name = "óra"

    def _new_child(self):
        return HourBucket()

    def hour_bucket(self, hour):
        return self._find_or_create(hour)

    def hours(self):
        return self.keys()

    @property
    def count(self):
        return sum(bucket.count for bucket in self._children.values())

    def __str__(self):
        lines = [f"{hour}: {bucket}" for hour, bucket in self.items()]
        return "{" + "\n".join(lines) + "}"


class YearBucket(_SparseBucket):
    """ Egy év havi gyűjtői (hónap 1-12 -> MonthBucket) """
    key_range = range(1, 13)
    key_name = "hónap"

    def _new_child(self):
        return MonthBucket()

    def month_bucket(self, month):
        return self._find_or_create(month)

    def months(self):
        return self.keys()

    @property
    def count(self):
        return sum(bucket.count for bucket in self._children.values())

    def __str__(self):
        blocks = [f"{MONTH_NAMES[month - 1]}:\n{bucket}" for month, bucket in self.items()]
        return "{" + "\n".join(blocks) + "}"


class Aggregator:
    """
    Évenkénti (év -> hónap -> óra) és összesített (hónap -> óra) átlagok.

    Két fázisa van: gyűjtés (csak record hívások) és riport (csak olvasás).
    Az első riport / export után a record AggregatorClosedError-t dob,
    újrakezdéshez új példány kell.
    """

    def __init__(self):
        self._years = {}
        self.all_years = YearBucket()
        self._reporting = False

    def year_bucket(self, year):
        bucket = self._years.get(year)
        if bucket is None:
            bucket = YearBucket()
            self._years[year] = bucket
        return bucket

    def years(self):
        return sorted(self._years)

    def year_range(self):
        if not self._years:
            return None
        return min(self._years), max(self._years)

    @property
    def sample_count(self):
        return sum(bucket.count for bucket in self._years.values())

    @property
    def reporting(self):
        return self._reporting

    def record(self, sample):
        if self._reporting:
            raise AggregatorClosedError("a riport már elkészült, új minta nem rögzíthető")

        # előbb minden lookup és konverzió, csak utána módosítunk
        moment = utc_time(sample.timestamp)
        temperature = float(sample.temperature)
        wind = float(sample.wind_speed)

        hour_bucket = self.year_bucket(moment.year).month_bucket(moment.month).hour_bucket(moment.hour)
        all_years_bucket = self.all_years.month_bucket(moment.month).hour_bucket(moment.hour)

        for bucket in (hour_bucket, all_years_bucket):
            bucket.temperature.add(temperature)
            bucket.wind.add(wind)

    def record_all(self, samples):
        recorded = 0
        for sample in samples:
            self.record(sample)
            recorded += 1
        return recorded

    def report(self):
        """ A teljes szöveges riport (évek, hónapok, órák növekvő sorrendben) """
        self._reporting = True

        years = self.years()
        blocks = [f"{year}:\n{self._years[year]}\n" for year in years]
        all_years_block = ""
        if years:
            all_years_block = f"\n{years[0]}-{years[-1]}:\n{self.all_years}"
        return "{" + "\n".join(blocks) + all_years_block + "}\n"

    def __str__(self):
        return self.report()

    def to_frame(self):
        """
        A riport táblázatos formában (pandas DataFrame).

        Oszlopok: period, year, month, hour, temperature, wind, samples.
        Elöl az évenkénti sorok, utánuk az összesített ("<első>-<utolsó>") sorok.
        """
        self._reporting = True

        rows = []
        for year in self.years():
            rows.extend(_leaf_rows(str(year), year, self._years[year]))

        span = self.year_range()
        if span is not None:
            rows.extend(_leaf_rows(f"{span[0]}-{span[1]}", pd.NA, self.all_years))

        frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
        frame["year"] = frame["year"].astype("Int64")
        return frame


def _leaf_rows(period, year, year_bucket):
    rows = []
    for month, month_bucket in year_bucket.items():
        for hour, hour_bucket in month_bucket.items():
            temperature, wind = hour_bucket.mean()
            rows.append([period, year, month, hour, float(temperature), float(wind), hour_bucket.count])
    return rows

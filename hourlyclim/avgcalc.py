#!/usr/bin/env python3
"""
 avgcalc.py

 Órás átlaghőmérséklet és átlagos szélsebesség számítása hónaponként és
 évenként, pontosvesszővel elválasztott meteorológiai CSV fájlokból.

 Használat:
    hourlyclim data/station_2022.csv data/station_2023.csv
    python -m hourlyclim.avgcalc data/*.csv --duplicates accumulate --output-csv results/hourly_avg.csv

 Kimenetek:
    - a riport a standard kimenetre kerül
    - opcionálisan: a riport CSV-ben (--output-csv)
    - a naplóüzenetek (kihagyott sorok, fájlok) a standard hibakimenetre
"""

import argparse
import logging
import sys
from pathlib import Path

from .avgweather import Aggregator
from .csvloader import (DEFAULT_ENCODING, DUPLICATE_POLICIES, TEMPERATURE_ID,
                        TIME_FORMAT, WIND_ID, collect_samples)

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog='hourlyclim',
                                     description='Órás átlaghőmérséklet és szélsebesség hónaponként és évenként CSV fájlokból')
    parser.add_argument('csv_files',
                        nargs='+',
                        metavar='CSV',
                        help='Bemeneti CSV fájl(ok) pontosvesszővel elválasztott formátumban')
    parser.add_argument('--temperature-column',
                        default=TEMPERATURE_ID,
                        help='A hőmérséklet oszlop neve a fejlécben')
    parser.add_argument('--wind-column',
                        default=WIND_ID,
                        help='A szélsebesség oszlop neve a fejlécben')
    parser.add_argument('--time-format',
                        default=TIME_FORMAT,
                        help='Az időbélyeg formátuma (strftime szintaxis, UTC)')
    parser.add_argument('--encoding',
                        default=DEFAULT_ENCODING,
                        help='A bemeneti fájlok karakterkódolása')
    parser.add_argument('--duplicates',
                        choices=DUPLICATE_POLICIES,
                        default='overwrite',
                        help='Azonos időbélyegű sorok kezelése: felülírás (alapértelmezett) vagy mindegyik beszámítása')
    parser.add_argument('--output-csv',
                        default=None,
                        help='Opcionális kimeneti CSV fájl a riport táblázatos változatával')
    parser.add_argument('--log-level',
                        default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Naplózási szint')
    return parser


"""
 A riport mentése CSV formátumban
"""
def save_csv(aggregator, output_file):

    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    frame = aggregator.to_frame()
    frame.to_csv(output_path, index=False, float_format='%.4f')
    logger.info(f"Táblázatos riport mentve: {output_path} ({len(frame)} sor)")


"""
 Főprogram
"""
def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(levelname)s - %(message)s')

    logger.info(f"=== {len(args.csv_files)} CSV fájl feldolgozása ===")

    # 1. Beolvasás
    loaded = collect_samples(args.csv_files,
                             temperature_id=args.temperature_column,
                             wind_id=args.wind_column,
                             time_format=args.time_format,
                             encoding=args.encoding,
                             duplicates=args.duplicates)

    # 2. Aggregálás
    aggregator = Aggregator()
    recorded = aggregator.record_all(loaded.samples)
    logger.info(f"{recorded} minta aggregálva, {loaded.rejected_rows} sor kihagyva")

    # 3. Riport
    print(aggregator.report())

    if args.output_csv:
        save_csv(aggregator, args.output_csv)

    if loaded.skipped:
        logger.warning(f"Kihagyott fájlok: {', '.join(loaded.skipped)}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

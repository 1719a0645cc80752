#!/usr/bin/env python
import argparse
import logging
import pathlib
import sys

from quaparser import Qua
from quaparser.utils import format_time


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Reads a QUA file and prints out its metadata, notecounts and timing information."
    )
    parser.add_argument("filename", nargs="+", help="input QUA file(s) to read")
    parser.add_argument("--porcelain", action="store_true", help="produce machine readable output")
    parser.add_argument("--log-level", action="store", help="change logging level. invalid values are silently ignored")
    conversion = parser.add_mutually_exclusive_group()
    conversion.add_argument("--normalize", action="store_true", help="convert scroll velocities to normalized form")
    conversion.add_argument("--denormalize", action="store_true", help="convert scroll velocities to denormalized form")
    parser.add_argument("-o", "--output", action="store", help="write the converted chart to this file")
    args = parser.parse_args(argv)

    if (args.normalize or args.denormalize) and (args.output is None or len(args.filename) != 1):
        parser.error("--normalize/--denormalize require --output and exactly one input file")

    log_level = logging.WARNING
    if args.log_level is not None:
        try:
            log_level_int = int(args.log_level)
            if log_level_int in logging._levelToName:
                log_level = log_level_int
        except ValueError:
            log_level_str = args.log_level.upper()
            log_level = logging._nameToLevel.get(log_level_str, log_level)
    logging.basicConfig(format="[%(levelname)s %(asctime)s] %(filename)s: %(message)s", level=log_level)

    for fn in args.filename:
        try:
            fpath = pathlib.Path(fn)
            if fpath.suffix != ".qua":
                raise OSError("invalid file extension")

            qua = Qua.from_file(fpath)

            if args.porcelain:
                print(
                    "\t".join(
                        str(n)
                        for n in [
                            qua.map_id,
                            qua.map_set_id,
                            qua.key_count,
                            qua.length,
                            qua.common_bpm(),
                            qua.tap_note_count,
                            qua.long_note_count,
                            len(qua.timing_points),
                            len(qua.slider_velocities),
                            int(qua.is_valid()),
                        ]
                    )
                )
            else:
                print(fn)
                print("=====   METADATA   =====")
                print(f"TITLE            | {qua.title}")
                print(f"ARTIST           | {qua.artist}")
                print(f"CREATOR          | {qua.creator}")
                print(f"DIFFICULTY       | {qua.difficulty_name}")
                print(f"MODE             | {qua.key_count}K{' (scratch)' if qua.has_scratch_key else ''}")
                print(f"MAP ID           | {qua.map_id:>5}")
                print(f"MAP SET ID       | {qua.map_set_id:>5}")
                print("=====    TIMING    =====")
                print(f"LENGTH           | {format_time(qua.length)}")
                print(f"COMMON BPM       | {qua.common_bpm():.2f}")
                print(f"TIMING POINTS    | {len(qua.timing_points):>5}")
                print(f"SCROLL VELOCITY  | {len(qua.slider_velocities):>5}")
                print(f"SV NORMALIZED    | {'yes' if qua.bpm_does_not_affect_scroll_velocity else 'no'}")
                print("=====  NOTECOUNTS  =====")
                print(f"TAP              | {qua.tap_note_count:>5}")
                print(f"LONG             | {qua.long_note_count:>5}")
                print(f"VALID            | {'yes' if qua.is_valid() else 'no'}")
                print()

            if args.normalize or args.denormalize:
                converted = qua.with_normalized_svs() if args.normalize else qua.with_denormalized_svs()
                converted.to_file(args.output)
        except Exception as err:
            if args.porcelain:
                print("\t".join(["-1"] * 10))
                continue
            print(f"{parser.prog}: {type(err).__name__}: {err}")
            print(f"{parser.prog}: error: unable to parse file, or no such file: {fn!r}")
            return 3

    return 0


if __name__ == "__main__":
    sys.exit(main())

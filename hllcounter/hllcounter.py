#!/usr/bin/env python
from __future__ import annotations
import sys
import os
from multiprocessing import Pool, cpu_count
import argparse
import csv
from typing import List, Optional
from hllcounter.lib.errors import InvalidRegisterCount, MergeMismatch
from hllcounter.lib.hashing import HashFunction, get_hash_function
from hllcounter.lib.hyperloglog import HyperLogLog, merge_all
from hllcounter.lib.utils import read_lines

DEFAULT_REGISTERS = 1024


def sketch_file(filepath: str,
                num_registers: int = DEFAULT_REGISTERS,
                hash_func: Optional[HashFunction] = None,
                debug: bool = False) -> HyperLogLog:
    """Build a sketch over the non-empty lines of one file."""
    sketch = HyperLogLog(num_registers, hash_func=hash_func, debug=debug)
    for lines in read_lines(filepath):
        sketch.add_batch(lines)
    if debug:
        print(f"Sketched {filepath}: estimate={sketch.count():.1f}")
    return sketch


def process_files(files: List[str],
                  num_registers: int = DEFAULT_REGISTERS,
                  hash_func: Optional[HashFunction] = None,
                  threads: int = 1,
                  debug: bool = False) -> List[HyperLogLog]:
    """Sketch each file independently, in parallel when threads > 1.

    Every worker owns its sketch; combining them is left to ``merge_all``.
    """
    pool_args = [(filepath, num_registers, hash_func, debug) for filepath in files]
    num_threads = min(threads, len(files))

    if debug:
        print(f"Processing {len(files)} files with {num_registers} registers using {max(num_threads, 1)} processes")

    if num_threads <= 1:
        return [sketch_file(*pool_arg) for pool_arg in pool_args]
    with Pool(num_threads) as pool:
        return pool.starmap(sketch_file, pool_args)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    arg_parser = argparse.ArgumentParser(
        description="""Estimate the number of distinct lines across text files with HyperLogLog.

        Each non-empty line is one element. Files ending in .gz are decompressed.
        One sketch is built per file and the sketches are merged for the total.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    arg_parser.add_argument('files', nargs='*',
                       help='Text files whose lines are counted')
    arg_parser.add_argument('--registers', '-m', type=int, default=DEFAULT_REGISTERS,
                       help=f'Number of registers, a power of two >= 16 (default: {DEFAULT_REGISTERS})')
    arg_parser.add_argument('--hash', choices=['sha256', 'xxhash'], default='sha256',
                       help='Hash function (default: sha256)')
    arg_parser.add_argument('--seed', type=int, default=42, help='Seed for the xxhash hash function')
    arg_parser.add_argument('--threads', type=int, default=None,
                       help='Number of worker processes (default: number of CPUs)')
    arg_parser.add_argument('--per-file', action='store_true', dest='per_file',
                       help='Also print one row per input file and loaded sketch')
    arg_parser.add_argument('--load', action='append', default=[], metavar='SKETCH',
                       help='Sketch file written by --write to merge into the total (repeatable)')
    arg_parser.add_argument('--write', '-o', type=str, default=None, metavar='PATH',
                       help='Write the merged sketch to PATH (.npz)')
    arg_parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = arg_parser.parse_args(argv)
    if not args.files and not args.load:
        arg_parser.error("at least one input file or --load sketch is required")
    return args


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for hllcounter."""
    args = parse_args(argv)

    missing = [path for path in args.files + args.load if not os.path.exists(path)]
    for path in missing:
        print(f"Error: File {path} does not exist", file=sys.stderr)
    if missing:
        sys.exit(2)

    hash_func = get_hash_function(args.hash, seed=args.seed)
    threads = args.threads if args.threads is not None else cpu_count()

    try:
        sketches = process_files(args.files, args.registers, hash_func, threads, args.debug)
        loaded = [HyperLogLog.load(path, hash_func=hash_func, debug=args.debug) for path in args.load]
        total = merge_all(sketches + loaded)
    except (InvalidRegisterCount, MergeMismatch) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    writer = csv.writer(sys.stdout, delimiter='\t', lineterminator='\n')
    writer.writerow(['source', 'estimate', 'error'])
    if args.per_file:
        for source, sketch in zip(args.files + args.load, sketches + loaded):
            writer.writerow([source, f"{sketch.count():.2f}", f"{sketch.error():.2f}"])
    writer.writerow(['total', f"{total.count():.2f}", f"{total.error():.2f}"])

    if args.write:
        total.write(args.write)
        print(f"Wrote merged sketch to {args.write}", file=sys.stderr)


if __name__ == "__main__":
    main()

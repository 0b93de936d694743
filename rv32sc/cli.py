import argparse
import logging
import sys

from rv32sc.cpu import Processor
from rv32sc.image import ImageError, read_hex
from rv32sc.sim import run


logger = logging.getLogger(__name__)


def _int(value):
    return int(value, 0)


def get_argparser():
    parser = argparse.ArgumentParser(
        prog = "rv32sc",
        description = "Run a program on the single-cycle RV32I core in simulation.")

    parser.add_argument(
        "-v", "--verbose", default = 0, action = "count",
        help = "increase logging verbosity")
    parser.add_argument(
        "-q", "--quiet", default = 0, action = "count",
        help = "decrease logging verbosity")

    parser.add_argument(
        "image", metavar = "IMAGE", type = str, nargs = "?",
        help = "hex program image (default: built-in sample program)")
    parser.add_argument(
        "--cycles", metavar = "N", type = int, default = 64,
        help = "run at most N instructions after reset (default: %(default)s)")
    parser.add_argument(
        "--reset-cycles", metavar = "N", type = int, default = 3,
        help = "hold reset for N cycles before running (default: %(default)s)")
    parser.add_argument(
        "--imem-depth", metavar = "WORDS", type = _int, default = 256,
        help = "instruction memory size in words (default: %(default)s)")
    parser.add_argument(
        "--dmem-depth", metavar = "BYTES", type = _int, default = 1024,
        help = "data memory size in bytes (default: %(default)s)")
    parser.add_argument(
        "--reset-vector", metavar = "ADDR", type = _int, default = 0,
        help = "address of the first instruction (default: %(default)#x)")
    parser.add_argument(
        "--no-stop", dest = "stop", default = True, action = "store_false",
        help = "keep running when an instruction jumps to itself")
    parser.add_argument(
        "--vcd", metavar = "FILE", type = str, default = None,
        help = "write a VCD waveform of the run to FILE")

    return parser


def main(args = None):
    args = get_argparser().parse_args(args)

    level = logging.WARNING + 10 * (args.quiet - args.verbose)
    logging.basicConfig(level = max(level, logging.DEBUG),
                        format = "%(levelname)s: %(name)s: %(message)s")

    program = None
    if args.image is not None:
        try:
            program = read_hex(args.image, depth = args.imem_depth)
        except (ImageError, OSError) as e:
            logger.error("cannot load %s: %s", args.image, e)
            return 1

    try:
        cpu = Processor(
            program = program,
            imem_depth = args.imem_depth,
            dmem_depth = args.dmem_depth,
            reset_vector = args.reset_vector)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    result = run(cpu,
                 cycles = args.cycles,
                 reset_cycles = args.reset_cycles,
                 stop_on_self_loop = args.stop,
                 vcd_file = args.vcd)

    for snapshot in result.trace:
        print(snapshot)
    print(f"pc={result.pc:08x}")
    for row in range(0, 32, 4):
        print("  ".join(f"x{n:<2}={result.registers[n]:08x}" for n in range(row, row + 4)))

    return 0


if __name__ == "__main__":
    sys.exit(main())

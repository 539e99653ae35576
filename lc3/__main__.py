import argparse
import atexit
import cProfile
import os
import sys
import termios

from .constants import WORD_MASK
from .machine import Machine

# Save original terminal attributes for restoration on exit
_original_termios: list | None = None


def _save_terminal_state() -> None:
    """Save the current terminal state if stdin is a tty."""
    global _original_termios
    if os.isatty(0):
        try:
            _original_termios = termios.tcgetattr(0)
        except termios.error:
            pass


def _restore_terminal_state() -> None:
    """Restore the original terminal state if it was saved."""
    if _original_termios is not None:
        try:
            termios.tcsetattr(0, termios.TCSANOW, _original_termios)
        except termios.error:
            pass


def _disable_input_buffering() -> None:
    """Switch the terminal to unbuffered, no-echo input for GETC/IN."""
    if _original_termios is None:
        return
    attrs = list(_original_termios)
    attrs[3] &= ~(termios.ICANON | termios.ECHO)  # lflags
    try:
        termios.tcsetattr(0, termios.TCSANOW, attrs)
    except termios.error:
        pass


parser = argparse.ArgumentParser(description="LC-3 emulator")
parser.add_argument(
    "--steps", type=int, default=None, help="maximum number of instructions to execute"
)
parser.add_argument("--trace", action="store_true", help="enable tracing")
parser.add_argument(
    "--ignore-reserved",
    action="store_true",
    help="treat RTI and reserved opcodes as no-ops instead of faulting",
)
parser.add_argument(
    "--profile",
    type=str,
    nargs="?",
    const="profile.stats",
    default=None,
    metavar="FILE",
    help="enable cProfile and write stats to FILE (default: profile.stats)",
)
parser.add_argument(
    "images",
    nargs="+",
    metavar="image",
    help="object image(s) to load; the first one sets the entry point",
)


def main(argv: list[str] | None = None) -> int:
    args = parser.parse_args(argv)

    machine: Machine = Machine(trace=args.trace, ignore_reserved=args.ignore_reserved)
    try:
        for image in args.images:
            machine.load_file(image)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    # Save terminal state before running the guest program
    _save_terminal_state()
    atexit.register(_restore_terminal_state)
    _disable_input_buffering()

    try:
        # Run until HALT or step limit reached
        machine.run(max_steps=args.steps)
    except ValueError as e:
        # PC has already moved past the faulting instruction
        fault_pc = (machine.cpu.registers.pc - 1) & WORD_MASK
        print(f"\nerror: {e} at PC={fault_pc:#06x}", file=sys.stderr)
        return 1
    finally:
        _restore_terminal_state()
    return 0


if __name__ == "__main__":
    args = parser.parse_args()
    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        try:
            exit_code = main()
        except KeyboardInterrupt:
            exit_code = 130
        finally:
            profiler.disable()
            profiler.dump_stats(args.profile)
            print(f"\nProfile stats written to {args.profile}", file=sys.stderr)
    else:
        exit_code = main()
    sys.exit(exit_code)

import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(__file__))

from calc.base_converter import apply_bitwise, convert_base
from calc.date_math import PERIOD_UNITS, add_period, diff_days, subtract_period
from calc.errors import CalculatorError
from calc.financial import calculate_financial
from calc.formatting import format_significant
from calc.session import CalculatorSession
from calc.unit_converter import UnitCategory, convert, find_category
from model.CalculatorState import CalculatorState
from render.renderers import AmortizationScheduleRenderer, DateDifferenceRenderer, FinancialSummaryRenderer
from settings import load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Multi-mode calculator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  calc       Evaluate a sequence of calculator keys
  loan       Monthly loan payment (add --schedule for the amortization table)
  mortgage   Monthly mortgage payment
  invest     Future value of a monthly-compounded investment
  convert    Convert a value between units
  radix      Convert between bases or apply NOT/LSH/RSH
  datediff   Days between two dates
  dateadd    Add days, months or years to a date
  datesub    Subtract days, months or years from a date
  shell      Start the interactive shell (default)

Examples:
  python src/Program.py calc 7 + 3 =
  python src/Program.py loan 200000 6.5 30 --schedule
  python src/Program.py convert 100 C F
  python src/Program.py radix FF 16 2
  python src/Program.py radix NOT 0 10
  python src/Program.py dateadd 2024-01-31 1 months
        """
    )
    sub = parser.add_subparsers(dest='command')

    calc_parser = sub.add_parser('calc', help='Evaluate calculator keys')
    calc_parser.add_argument('keys', nargs='+', help="Keys, e.g. 7 + 3 =")

    for kind in ('loan', 'mortgage', 'invest'):
        p = sub.add_parser(kind, help=f'{kind.capitalize()} calculation')
        p.add_argument('principal')
        p.add_argument('rate', help='Annual interest rate in percent')
        p.add_argument('years')
        if kind != 'invest':
            p.add_argument('--schedule', '-s', action='store_true',
                           help='Print the amortization schedule')
            p.add_argument('--rows', type=int, default=None,
                           help='Limit the schedule to the first N payments')

    convert_parser = sub.add_parser('convert', help='Unit conversion')
    convert_parser.add_argument('value')
    convert_parser.add_argument('from_unit')
    convert_parser.add_argument('to_unit')
    convert_parser.add_argument('--category', '-c', choices=[c.value for c in UnitCategory])

    radix_parser = sub.add_parser('radix', help='Base conversion and bitwise operations')
    radix_parser.add_argument('first', help='Digits, or NOT/LSH/RSH')
    radix_parser.add_argument('second', help='Source base, or digits for a bitwise op')
    radix_parser.add_argument('third', help='Target base, or the base for a bitwise op')

    diff_parser = sub.add_parser('datediff', help='Days between two dates')
    diff_parser.add_argument('first')
    diff_parser.add_argument('second')

    for name in ('dateadd', 'datesub'):
        p = sub.add_parser(name, help='Shift a date')
        p.add_argument('start')
        p.add_argument('amount', type=int)
        p.add_argument('unit', choices=PERIOD_UNITS)

    sub.add_parser('shell', help='Interactive shell')
    return parser


def run_command(args, settings) -> int:
    """Execute a parsed sub-command; returns the process exit code."""
    if args.command == 'calc':
        session = CalculatorSession(CalculatorState(precision=settings.precision))
        if not session.press(args.keys):
            print(f"Error: {session.last_error}")
            return 1
        print(session.display)
        return 0

    if args.command in ('loan', 'mortgage', 'invest'):
        kind = 'investment' if args.command == 'invest' else args.command
        result = calculate_financial(kind, args.principal, args.rate, args.years)
        FinancialSummaryRenderer(settings.locale).render(result)
        if getattr(args, 'schedule', False):
            AmortizationScheduleRenderer(args.rows, settings.locale).render(result)
        return 0

    if args.command == 'convert':
        category = args.category or find_category(args.from_unit)
        if category is None:
            print(f"Error: Unknown unit '{args.from_unit}'")
            return 1
        result = convert(args.value, args.from_unit, args.to_unit, category)
        print(f"{args.value} {args.from_unit} = {format_significant(result)} {args.to_unit}")
        return 0

    if args.command == 'radix':
        bitwise = args.first.upper() in ('NOT', 'LSH', 'RSH')
        try:
            bases = [int(args.third)] if bitwise else [int(args.second), int(args.third)]
        except ValueError:
            print("Error: Bases must be whole numbers")
            return 1
        if bitwise:
            print(apply_bitwise(args.second, bases[0], args.first))
        else:
            print(convert_base(args.first, *bases))
        return 0

    if args.command == 'datediff':
        DateDifferenceRenderer().render(diff_days(args.first, args.second))
        return 0

    if args.command in ('dateadd', 'datesub'):
        shift = add_period if args.command == 'dateadd' else subtract_period
        print(shift(args.start, args.amount, args.unit).isoformat())
        return 0

    from shell import CalculatorShell
    CalculatorShell(settings).cmdloop()
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()

    try:
        code = run_command(args, settings)
    except CalculatorError as e:
        print(f"Error: {e.message}")
        code = 1
    if code:
        sys.exit(code)


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
# ledger.py
"""
Investment ledger - admin command line entry point.

Usage:
    python ledger.py init-db
    python ledger.py register --name Alice --email alice@example.com [--ref 0x...]
    python ledger.py wallet --user-id 1 --address 0x...
    python ledger.py package-add --name Gold --min 1000 [--max 50000] --daily-return 0.5 [--duration 180]
    python ledger.py packages [--all]
    python ledger.py submit --user-id 3 --amount 10000 [--package-id 1] [--ref TX123] [--sponsor 0x...]
    python ledger.py approve --investment-id 7
    python ledger.py reject --investment-id 7
    python ledger.py reconcile [--user-id 3 ...]
    python ledger.py upline --user-id 3
    python ledger.py levels --user-id 1
    python ledger.py stats
    python ledger.py revenue [--days 7]
"""
import argparse
import asyncio
import logging
import sys

from config import Config, ConfigurationError
from core.db import create_tables, ledger_session
from models.listeners import register_all_listeners
from ledger_system import (
    ApprovalService,
    InvestmentService,
    LedgerError,
    LedgerStore,
    PackageService,
    ReconciliationService,
    ReportService,
    UserService,
)
from ledger_system.config.commission import get_level_percentage
from ledger_system.utils.chain_walker import ChainWalker

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure root logging from Config.LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, Config.get(Config.LOG_LEVEL), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    # Suppress noisy loggers
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Investment ledger administration')
    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('init-db', help='Create all tables')

    register = commands.add_parser('register', help='Register a user')
    register.add_argument('--name', required=True)
    register.add_argument('--email', required=True)
    register.add_argument('--ref', help="Sponsor's wallet address")

    wallet = commands.add_parser('wallet', help='Connect a wallet (once)')
    wallet.add_argument('--user-id', type=int, required=True)
    wallet.add_argument('--address', required=True)

    package_add = commands.add_parser('package-add', help='Create an investment package')
    package_add.add_argument('--name', required=True)
    package_add.add_argument('--min', required=True, dest='min_investment')
    package_add.add_argument('--max', dest='max_investment', help='Omit for unlimited')
    package_add.add_argument('--daily-return', required=True, help='Percent per day')
    package_add.add_argument('--duration', type=int, help='Days')

    packages = commands.add_parser('packages', help='List investment packages')
    packages.add_argument('--all', action='store_true', help='Include inactive packages')

    submit = commands.add_parser('submit', help='Submit an investment request')
    submit.add_argument('--user-id', type=int, required=True)
    submit.add_argument('--amount', required=True)
    submit.add_argument('--package-id', type=int)
    submit.add_argument('--ref', help='Payment reference')
    submit.add_argument('--sponsor', help='Sponsor wallet string')

    for name in ('approve', 'reject'):
        decide = commands.add_parser(name, help=f'{name.capitalize()} a pending investment')
        decide.add_argument('--investment-id', type=int, required=True)

    reconcile = commands.add_parser('reconcile', help='Repair totalInvestment drift')
    reconcile.add_argument('--user-id', type=int, action='append', dest='user_ids')

    upline = commands.add_parser('upline', help='Show sponsor chain with level percentages')
    upline.add_argument('--user-id', type=int, required=True)

    levels = commands.add_parser('levels', help='Level income report')
    levels.add_argument('--user-id', type=int, required=True)

    commands.add_parser('stats', help='Dashboard totals')

    revenue = commands.add_parser('revenue', help='Daily deposits and withdrawals')
    revenue.add_argument('--days', type=int, default=7)

    return parser


async def run_command(args, session) -> None:
    """Dispatch one parsed command."""
    if args.command == 'register':
        user = await UserService(session).registerUser(args.name, args.email, args.ref)
        print(f"✓ User {user.userID} registered, referral code {user.referralCode}")

    elif args.command == 'wallet':
        user = await UserService(session).connectWallet(args.user_id, args.address)
        print(f"✓ Wallet {user.wallet} connected to user {user.userID}")

    elif args.command == 'package-add':
        package = await PackageService(session).createPackage(
            args.name,
            args.min_investment,
            args.daily_return,
            maxInvestment=args.max_investment,
            duration=args.duration
        )
        print(f"✓ Package {package.packageID} '{package.name}' created")

    elif args.command == 'packages':
        packages = await PackageService(session).listPackages(activeOnly=not args.all)
        if not packages:
            print("No packages")
        for package in packages:
            maximum = package.maxInvestment if package.maxInvestment is not None else "Unlimited"
            state = "" if package.isActive else " (inactive)"
            print(
                f"  #{package.packageID:<4} {package.name:<16} {package.minInvestment} - {maximum}  "
                f"{package.dailyReturn}%/day  {package.duration} days{state}"
            )

    elif args.command == 'submit':
        investment = await InvestmentService(session).submitInvestmentRequest(
            args.user_id,
            args.amount,
            packageId=args.package_id,
            transactionRef=args.ref,
            sponsorRef=args.sponsor
        )
        print(
            f"✓ Investment {investment.investmentID} pending: {investment.amount} "
            f"at {investment.dailyReturn}%/day (ref {investment.transactionId})"
        )

    elif args.command in ('approve', 'reject'):
        result = await ApprovalService(session).decideInvestment(args.investment_id, args.command)
        investment = result["investment"]
        print(f"{result['message']} (investment {investment.investmentID}: {investment.status})")
        for payout in result["payouts"]:
            state = "paid" if payout["paid"] else "skipped"
            print(
                f"  L{payout['level']:<2} user {payout['userId']:<6} "
                f"{payout['percentage']}% = {payout['amount']} [{state}]"
            )

    elif args.command == 'reconcile':
        report = await ReconciliationService(session).reconcileTotalInvestments(args.user_ids)
        print(f"Checked {report['checked']} users, fixed {report['fixed']}")
        for row in report["results"]:
            print(f"  {row['email']}: {row['oldTotal']} -> {row['correctTotal']} ({row['difference']:+})")

    elif args.command == 'upline':
        store = LedgerStore(session)
        user = store.findUserById(args.user_id)
        if not user:
            print(f"❌ User {args.user_id} not found")
            return
        chain = ChainWalker(store).get_upline_chain(user)
        if not chain:
            print("No upline")
        for level, sponsor in enumerate(chain, start=1):
            print(f"  L{level:<2} {sponsor.email:<30} {get_level_percentage(level)}%")

    elif args.command == 'levels':
        report = await ReportService(session).getLevelIncomeReport(args.user_id)
        print(f"{'Level':<6}{'Members':>8}{'Business':>16}{'%':>6}{'Income':>14}")
        print("-" * 50)
        for row in report["levels"]:
            print(
                f"{row['level']:<6}{row['members']:>8}{row['business']:>16.2f}"
                f"{row['percentage']:>6}{row['income']:>14.2f}"
            )
        print("-" * 50)
        print(f"Total income: {report['totalIncome']:.2f} from {report['totalMembers']} members")

    elif args.command == 'stats':
        stats = await ReportService(session).getDashboardStats()
        for key, value in stats.items():
            print(f"{key:<20} {value}")

    elif args.command == 'revenue':
        report = await ReportService(session).getRevenueReport(args.days)
        print(f"{'Date':<12}{'Deposits':>14}{'Withdrawals':>14}{'Net':>14}")
        for row in report["revenueData"]:
            print(
                f"{row['date']:<12}{row['deposits']:>14.2f}"
                f"{row['withdrawals']:>14.2f}{row['netRevenue']:>14.2f}"
            )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        Config.initialize_from_env()
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    configure_logging()
    register_all_listeners()
    create_tables()

    if args.command == 'init-db':
        print("✓ Database ready")
        return 0

    try:
        with ledger_session() as session:
            asyncio.run(run_command(args, session))
        return 0
    except LedgerError as e:
        logger.debug(f"Command {args.command} failed", exc_info=True)
        print(f"❌ {type(e).__name__}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

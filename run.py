#!/usr/bin/env python3
"""
Core Ledger Demo

Registers two accounts, moves money between them through named commands and
prints the balances.
"""

import sys

from core_ledger import LedgerEngine, LedgerCommand, LedgerError
from core_ledger.config import get_config
from core_ledger.logging_config import setup_logging


def main() -> None:
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)

    ledger = LedgerEngine(config=config)
    first_id = ledger.register("Pitter Black", 100)
    second_id = ledger.register("Oliver White", 700)

    def show(label):
        return lambda balance: print(f"{label} has {balance}₴")

    ledger.dispatch(LedgerCommand.GET, first_id, show("Pitter Black"))   # 100₴
    ledger.dispatch(LedgerCommand.GET, second_id, show("Oliver White"))  # 700₴
    ledger.dispatch(LedgerCommand.SEND, first_id, second_id, 50)
    ledger.dispatch(LedgerCommand.GET, first_id, show("Pitter Black"))   # 50₴
    ledger.dispatch(LedgerCommand.GET, second_id, show("Oliver White"))  # 750₴


if __name__ == "__main__":
    try:
        main()
    except LedgerError as e:
        print(f"❌ Ledger error: {e}")
        sys.exit(1)

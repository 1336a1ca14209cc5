from ledgerbook.cli import run

run()

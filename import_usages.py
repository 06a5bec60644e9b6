# import_usages.py
# Carga usuarios demo y usos desde un CSV:
#   python import_usages.py service_usages.csv
from __future__ import annotations

import argparse
import sys

from run_app import app
from wsbilling.services.importer import UsageImporter


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Importa usos de servicios desde CSV")
    parser.add_argument("csv_path", nargs="?", default="service_usages.csv")
    parser.add_argument(
        "--skip-demo-users",
        action="store_true",
        help="no crear demo1/demo2 (deben existir los usuarios del CSV)",
    )
    args = parser.parse_args(argv)

    with app.app_context():
        report = UsageImporter().run(args.csv_path, create_demo_users=not args.skip_demo_users)

    print(
        f"Filas: {report.rows_read} · bills: {report.bills_created} · omitidas: {report.rows_skipped} · "
        f"workspaces: {report.workspaces_created} · tokens: {report.tokens_created} · "
        f"servicios: {report.services_created}"
    )
    return 0 if report.rows_skipped == 0 else 1


if __name__ == "__main__":
    sys.exit(main())

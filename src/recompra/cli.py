"""
@file cli.py
@brief CLI per parsing scontrini e previsione del prossimo acquisto.
@ingroup cli_module

@details
Comandi:
- parse: stampa il Purchase JSON di un singolo scontrino (.pdf o .txt)
- predict: analizza tutti gli scontrini di una cartella, opzionalmente
  scrive i JSON di output e stampa la previsione

Opzioni globali:
- --config per il file TOML (vedi config.py)
- --log-level per il livello di logging
"""

from __future__ import annotations
import argparse
import json
import sys
from datetime import date

from recompra.analytics.identity import ExactNameResolver, NormalizedNameResolver
from recompra.config import load_config
from recompra.domain.models import PurchaseForecast
from recompra.domain.parsing import parse_receipt
from recompra.errors import ReceiptParseError
from recompra.extract.pdf import list_receipt_files, read_receipt_text
from recompra.logging_setup import configure_logging
from recompra.output.json_sink import write_outputs
from recompra.pipeline import ReceiptSource, run_pipeline


def format_forecast(fc: PurchaseForecast) -> str:
    """
    @brief Rende la previsione in formato testuale.
    @param fc Output di forecast().
    @return Testo multi-riga.
    """
    out: list[str] = []
    if fc.average_days_between_purchases is None:
        out.append("Average days between purchases: n/a (less than two purchases)")
    else:
        out.append(f"Average days between purchases: {fc.average_days_between_purchases:.2f}")
        out.append(f"Next purchase date: {fc.next_purchase_date}")

    out.append("")
    out.append("Suggested products for next purchase:")
    if not fc.products:
        out.append("  (none)")
    for idx, p in enumerate(fc.products, 1):
        out.append("")
        out.append(f"{idx}. {p.name}")
        out.append(f"   Average purchase frequency: every {p.average_purchase_frequency} days")
        out.append(f"   Days since last purchase: {p.days_since_last_purchase} days")
        out.append(f"   Typical quantity: {p.average_quantity_per_purchase}")
        out.append(f"   Average price: R$ {p.average_price_in_reais:.2f}")
    return "\n".join(out)


def _cmd_parse(args) -> int:
    try:
        text = read_receipt_text(args.input)
    except (OSError, ValueError) as e:
        print(f"Errore lettura {args.input}: {e}", file=sys.stderr)
        return 1

    try:
        purchase = parse_receipt(text)
    except ReceiptParseError as e:
        print(f"Errore parsing {args.input}: {e}", file=sys.stderr)
        return 1
    print(purchase.model_dump_json(by_alias=True, indent=2))
    return 0


def _cmd_predict(args, settings) -> int:
    input_dir = args.input_dir or settings.input_dir
    output_dir = args.output_dir or settings.output_dir
    today = date.fromisoformat(args.today) if args.today else None

    sources = [
        ReceiptSource(name=f.name, text=read_receipt_text(f))
        for f in list_receipt_files(input_dir)
    ]
    resolver = NormalizedNameResolver() if args.normalize_names else ExactNameResolver()

    result = run_pipeline(
        sources,
        today,
        workers=args.workers or settings.workers,
        resolver=resolver,
        per_product_recency=args.per_product_recency or settings.per_product_recency,
        overdue_threshold=settings.overdue_threshold,
        min_purchases=settings.min_purchases,
    )

    if output_dir:
        write_outputs(result, output_dir)

    if args.json:
        doc = result.forecast.model_dump(by_alias=True)
        doc["skipped"] = result.skipped
        print(json.dumps(doc, indent=2, ensure_ascii=False))
    else:
        print(format_forecast(result.forecast))
        if result.skipped:
            print(f"\nSkipped receipts: {', '.join(result.skipped)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    @brief Entry point CLI.
    @param argv Argomenti (default sys.argv).
    @return Exit code.
    """
    p = argparse.ArgumentParser(prog="recompra")
    p.add_argument("--config", "-c", default=None, help="File di configurazione TOML")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = p.add_subparsers(dest="cmd", required=True)

    parse = sub.add_parser("parse", help="Parsing di un singolo scontrino, stampa il JSON")
    parse.add_argument("--input", required=True, help="File .pdf o .txt")

    predict = sub.add_parser("predict", help="Analizza una cartella di scontrini e stampa la previsione")
    predict.add_argument("--input-dir", default=None, help="Cartella con .pdf/.txt (default da config)")
    predict.add_argument("--output-dir", default=None, help="Dove scrivere i JSON di output")
    predict.add_argument("--today", default=None, help="Data di valutazione YYYY-MM-DD (default: oggi)")
    predict.add_argument(
        "--per-product-recency",
        action="store_true",
        help="Giorni dall'ultimo acquisto calcolati per prodotto invece che globali",
    )
    predict.add_argument(
        "--normalize-names",
        action="store_true",
        help="Identità prodotto su nome normalizzato (maiuscole/spazi ignorati)",
    )
    predict.add_argument("--workers", type=int, default=None, help="Thread di parsing")
    predict.add_argument("--json", action="store_true", help="Output in JSON")

    args = p.parse_args(argv)

    settings = load_config(args.config)
    configure_logging(args.log_level or settings.log_level)

    if args.cmd == "parse":
        return _cmd_parse(args)

    if args.cmd == "predict":
        return _cmd_predict(args, settings)

    return 2


if __name__ == "__main__":
    sys.exit(main())

import pytest

from recompra.domain.parsing import parse_products, parse_receipt, parse_receipt_with_warnings, parse_total
from recompra.errors import ReceiptParseError


def test_parse_receipt_single_item(arroz_receipt):
    purchase = parse_receipt(arroz_receipt)

    assert purchase.date == "2024-01-10"
    assert purchase.total == 45.90
    assert len(purchase.products) == 1

    p = purchase.products[0]
    assert p.quantity == 2
    assert p.name == "Arroz Tipo 1"
    assert p.total_price == 10.00
    assert p.unit_price == 5.00
    assert p.weight is None
    assert p.price_per_kg is None
    assert p.substituted is None
    assert p.out_of_stock is False


def test_weight_item(make_receipt):
    text = make_receipt(
        "3 de abril de 2024",
        "12,00",
        [("1", "Banana Prata R$ 12,00", "Final 1,500 kg R$ 8,00/kg")],
    )
    p = parse_receipt(text).products[0]

    assert p.weight == 1.5
    assert p.price_per_kg == 8.00
    assert p.unit_price is None


def test_weight_item_partial_detail(make_receipt):
    text = make_receipt(
        "3 de abril de 2024",
        "9,90",
        [("1", "Queijo Minas R$ 9,90", "Peso aproximado 0,5 KG")],
    )
    p = parse_receipt(text).products[0]

    assert p.weight is None
    assert p.price_per_kg is None
    assert p.total_price == 9.90


def test_substituted_item(make_receipt):
    text = make_receipt(
        "7 de maio de 2024",
        "5,49",
        [("1", "Leite Integral R$ 5,49", "R$ 5,49/pc", "Substituído Leite Desnatado")],
    )
    p = parse_receipt(text).products[0]

    assert p.substituted == "Leite Desnatado"


def test_substitution_line_does_not_hide_next_item(make_receipt):
    text = make_receipt(
        "7 de maio de 2024",
        "11,48",
        [
            ("1", "Leite Integral R$ 5,49", "R$ 5,49/pc", "Substituído Leite Desnatado"),
            ("1", "Pão de Forma R$ 5,99", "R$ 5,99/pc"),
        ],
    )
    products = parse_receipt(text).products

    assert [p.name for p in products] == ["Leite Integral", "Pão de Forma"]
    assert products[1].substituted is None


def test_out_of_stock_item(make_receipt):
    text = make_receipt(
        "7 de maio de 2024",
        "0,00",
        [("2", "Feijão Preto Esgotado R$ 0,00", "R$ 0,00/pc")],
    )
    p = parse_receipt(text).products[0]

    assert p.out_of_stock is True
    assert p.name == "Feijão Preto Esgotado"
    assert p.quantity == 2


def test_quantity_without_price_is_skipped():
    text = "\n".join([
        "1 de junho de 2024",
        "TotalR$ 3,00",
        "42",
        "Página 1 de 2",
        "1",
        "Sal Refinado R$ 3,00",
        "Qtd. solicitada",
        "R$ 3,00/pc",
    ])
    purchase, warnings = parse_receipt_with_warnings(text)

    assert [p.name for p in purchase.products] == ["Sal Refinado"]
    assert any(w.startswith("item_skipped") for w in warnings)


def test_multiple_items_keep_order(make_receipt):
    text = make_receipt(
        "15 de fevereiro de 2024",
        "30,00",
        [
            ("3", "Iogurte Natural R$ 9,00", "R$ 3,00/pc"),
            ("1", "Tomate R$ 6,00", "Final 0,750 kg R$ 8,00/kg"),
            ("5", "Ovos Brancos R$ 15,00", "R$ 3,00/pc"),
        ],
    )
    products = parse_receipt(text).products

    assert [p.name for p in products] == ["Iogurte Natural", "Tomate", "Ovos Brancos"]
    assert [p.quantity for p in products] == [3, 1, 5]
    assert products[1].weight == 0.75
    assert len({p.id for p in products}) == 3


def test_truncated_text_after_quantity():
    text = "1 de junho de 2024\nTotalR$ 3,00\n2"
    assert parse_receipt(text).products == []


def test_truncated_text_before_detail():
    text = "1 de junho de 2024\nTotalR$ 3,00\n1\nSal Refinado R$ 3,00"
    p = parse_receipt(text).products[0]

    assert p.total_price == 3.00
    assert p.unit_price is None


def test_missing_date_is_fatal(arroz_receipt):
    text = arroz_receipt.replace("10 de janeiro de 2024", "ontem")
    with pytest.raises(ReceiptParseError):
        parse_receipt(text)


def test_missing_total_is_fatal(arroz_receipt):
    text = arroz_receipt.replace("TotalR$ 45,90", "Total a pagar")
    with pytest.raises(ReceiptParseError):
        parse_receipt(text)


def test_parse_total():
    assert parse_total("Subtotal R$ 40,00\nTotalR$ 45,90") == 45.90


def test_parse_products_without_header():
    products = parse_products("1\nCafé Torrado R$ 18,90\nx\nR$ 18,90/pc")
    assert products[0].name == "Café Torrado"


def test_totals_mismatch_warning(arroz_receipt):
    _, warnings = parse_receipt_with_warnings(arroz_receipt)
    assert any(w.startswith("totals_inconsistent") for w in warnings)


def test_purchase_serializes_camel_case(arroz_receipt):
    doc = parse_receipt(arroz_receipt).model_dump(by_alias=True)
    product = doc["products"][0]

    assert set(product) == {
        "id", "quantity", "name", "unitPrice", "totalPrice",
        "weight", "pricePerKg", "substituted", "outOfStock",
    }

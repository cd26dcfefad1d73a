import pytest


def _build_receipt(date_phrase, total, items, header=("Pedido #48213",)):
    """
    Testo nel layout dello scontrino:
    quantità / nome + prezzo / riga fissa / dettaglio [/ riga extra].
    items: tuple (qty, info, detail) oppure (qty, info, detail, extra).
    """
    lines = list(header)
    lines.append(f"Entregue em {date_phrase}")
    lines.append(f"TotalR$ {total}")
    for item in items:
        qty, info, detail = item[:3]
        lines += [qty, info, "Qtd. solicitada", detail]
        if len(item) > 3:
            lines.append(item[3])
    lines.append("Obrigado pela preferência")
    return "\n".join(lines)


@pytest.fixture
def make_receipt():
    return _build_receipt


@pytest.fixture
def arroz_receipt(make_receipt):
    return make_receipt(
        "10 de janeiro de 2024",
        "45,90",
        [("2", "Arroz Tipo 1 R$ 10,00", "R$ 5,00/pc")],
    )
